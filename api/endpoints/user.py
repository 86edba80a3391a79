from fastapi import APIRouter, Depends

from core.gates import get_current_user
from models.models_user import User

router = APIRouter()


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"status": "success", "data": {"user": user.filtered()}}
