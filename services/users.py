import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import Conflict, UpstreamStoreFailure
from models.models_user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserStore:
    """Access to user records in the primary (pooled) database."""

    def __init__(self, session: Session):
        self.session = session

    def get_user(self, user_id: int) -> Optional[User]:
        try:
            return self.session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.exception("user lookup by id failed: %s", e)
            raise UpstreamStoreFailure()

    def find_user_by_email(self, email: str) -> Optional[User]:
        try:
            return (
                self.session.query(User)
                .filter(func.lower(User.email) == normalize_email(email))
                .first()
            )
        except SQLAlchemyError as e:
            logger.exception("user lookup by email failed: %s", e)
            raise UpstreamStoreFailure()

    def user_exists(self, email: str) -> bool:
        return self.find_user_by_email(email) is not None

    def insert_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        customer_name: Optional[str] = None,
    ) -> User:
        u = User(
            name=name,
            email=normalize_email(email),
            password=password_hash,
            role=role,
            customer_name=customer_name or None,
        )
        try:
            self.session.add(u)
            self.session.commit()
            self.session.refresh(u)
        except IntegrityError:
            self.session.rollback()
            logger.info("duplicate registration for %s", u.email)
            raise Conflict()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("user insert failed: %s", e)
            raise UpstreamStoreFailure()
        return u
