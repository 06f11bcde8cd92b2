from fastapi import APIRouter

router = APIRouter(tags=["status"])


@router.get("/status")
def api_status():
    return {"status": "OK", "message": "Sharing API is running"}
