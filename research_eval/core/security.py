# research_eval/core/security.py
from __future__ import annotations

import hmac
import logging
from typing import Dict, Optional

import bcrypt
from sqlmodel import Session, select
from werkzeug.security import check_password_hash, generate_password_hash

from research_eval.core.db import guarded
from research_eval.core.errors import AuthenticationError, NotFoundError, ValidationError
from research_eval.core.settings import settings
from research_eval.models.db_models import User

logger = logging.getLogger(__name__)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def _is_bcrypt(stored_hash: str) -> bool:
    return stored_hash.startswith(BCRYPT_PREFIXES)


def verify_password(stored_hash: str, password: str) -> bool:
    """
    Accounts created by the previous backend carry bcrypt hashes
    ($2a$/$2b$/$2y$); new ones use werkzeug's format.
    """
    try:
        if _is_bcrypt(stored_hash):
            # $2y$ is the PHP spelling of the same algorithm
            normalized = "$2b$" + stored_hash[4:] if stored_hash.startswith("$2y$") else stored_hash
            return bcrypt.checkpw(password.encode("utf-8"), normalized.encode("utf-8"))
        return check_password_hash(stored_hash, password)
    except ValueError:
        logger.warning("Unrecognised password hash format")
        return False


def _legacy_password_ok(password: str) -> bool:
    if not settings.ALLOW_LEGACY_PASSWORD:
        return False
    return hmac.compare_digest(password.encode(), settings.LEGACY_PASSWORD.encode())


def authenticate(session: Session, email: Optional[str], password: Optional[str]) -> Dict[str, object]:
    """
    Checks email/password against the users table.
    Returns {"id", "email"} on success; no token or session is issued.
    """
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Email and password are required")

    with guarded(session, "login"):
        user = session.exec(select(User).where(User.email == email)).first()

    if user is None:
        logger.info("Login failed: unknown user %s", email)
        raise NotFoundError("User not found")

    if not user.password:
        ok = _legacy_password_ok(password)
    else:
        ok = verify_password(user.password, password)

    if not ok:
        logger.info("Login failed: wrong password for %s", email)
        raise AuthenticationError("Incorrect password")

    logger.info("Login ok for user %s", user.id)
    return {"id": user.id, "email": user.email}
