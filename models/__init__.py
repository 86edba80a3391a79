from .models_user import User

__all__ = [
    "User",
]
