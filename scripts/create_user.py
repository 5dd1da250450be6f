# scripts/create_user.py
"""Users are created out-of-band; there is no signup endpoint."""
import argparse
import sys

from sqlmodel import Session, select

from research_eval.core.db import get_engine, init_db
from research_eval.core.security import hash_password
from research_eval.models.db_models import User


def upsert_user(session: Session, email: str, password: str | None) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    hashed = hash_password(password) if password else None
    if user is None:
        user = User(email=email, password=hashed)
        session.add(user)
    else:
        user.password = hashed
    session.commit()
    session.refresh(user)
    return user


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Create or reset an evaluator account")
    p.add_argument("email")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--password", help="stored as a salted hash")
    g.add_argument("--no-password", action="store_true",
                   help="leave the hash empty (only usable with ALLOW_LEGACY_PASSWORD)")
    args = p.parse_args(argv)

    init_db()
    with Session(get_engine()) as session:
        user = upsert_user(session, args.email.strip(), None if args.no_password else args.password)

    state = "without password" if user.password is None else "with hashed password"
    print(f"[OK] user {user.id} <{user.email}> {state}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
