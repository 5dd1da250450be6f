# research_eval/routers/auth.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from research_eval.core.db import get_session
from research_eval.core.security import authenticate
from research_eval.models.schemas import LoginIn, LoginOut, UserOut

router = APIRouter(prefix="", tags=["auth"])


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    """
    Body: {"email": "...", "password": "..."}
    Failures come back as {"success": false, "message": ...} with 400/401/404.
    """
    user = authenticate(session, payload.email, payload.password)
    return LoginOut(success=True, user=UserOut(**user))
