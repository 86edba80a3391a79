from fastapi import APIRouter

router = APIRouter()


@router.get("/healthchecker")
def health_checker():
    return {"status": "success", "message": "The application is healthy"}
