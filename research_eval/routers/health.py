from fastapi import APIRouter

from research_eval.models.schemas import HealthOut

router = APIRouter(prefix="", tags=["health"])

@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(status="OK", message="Server is running")
