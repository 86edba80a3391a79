from sqlalchemy import Column, Integer, Text, Boolean, Index
from sqlalchemy.types import DateTime
from sqlalchemy.sql import func
from core.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="user")
    customer_name = Column(Text, nullable=True)
    photo = Column(Text, nullable=False, default="default.png")
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def filtered(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "customerName": self.customer_name,
            "photo": self.photo,
            "verified": self.verified,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


Index("users_email_lower_idx", func.lower(User.email), unique=True)
