from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    # NULL for accounts created before hashes were stored
    password: Optional[str] = Field(default=None)


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    category: str = Field(index=True)
    name: str
    type: Optional[str] = None
    researchers: Optional[str] = None
    study_program: Optional[str] = None
    research_line: Optional[str] = None
    contact_email: Optional[str] = None
    general_info: Optional[str] = None
    problem_description: Optional[str] = None
    theoretical_framework: Optional[str] = None
    project_summary: Optional[str] = None
    file_url: Optional[str] = None
    user_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)


class Evaluation(SQLModel, table=True):
    __tablename__ = "evaluations"

    id: Optional[int] = Field(default=None, primary_key=True)
    # one evaluation per project; the upsert conflicts on this column
    project_id: int = Field(unique=True, index=True)

    eval1_1: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval1_2: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval1_3: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval1_4: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval1_5: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    obs1: Optional[str] = None

    eval2_1: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval2_2: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval2_3: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    obs2: Optional[str] = None

    eval3_1: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval3_2: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval3_3: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    eval3_4: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    obs3: Optional[str] = None

    final_recommendations: Optional[str] = None
    total_score: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=2)
    evaluator_id: Optional[int] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
