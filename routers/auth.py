from fastapi import APIRouter, Depends
from auth.deps import get_current_user

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


@router.get("/me")
def get_me(user_id: str = Depends(get_current_user)):
    """
    現在のトークンから解決したユーザーIDを返す
    """
    return {"user_id": user_id}
