from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator

from research_eval.core.rubric import SCORE_FIELDS, format_score, to_score

# Scores travel as "20.00" strings
Score = Annotated[Decimal, PlainSerializer(format_score, return_type=str, when_used="json")]


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: int
    email: str


class LoginOut(BaseModel):
    success: bool = True
    user: UserOut


class MessageOut(BaseModel):
    success: bool = True
    message: str


class HealthOut(BaseModel):
    status: str = "OK"
    message: str


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
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
    user_id: Optional[int] = None
    created_at: datetime
    total_score: Optional[Score] = None
    has_evaluation: bool = False


class EvaluationIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_id: int

    eval1_1: Decimal = Decimal("0")
    eval1_2: Decimal = Decimal("0")
    eval1_3: Decimal = Decimal("0")
    eval1_4: Decimal = Decimal("0")
    eval1_5: Decimal = Decimal("0")
    obs1: Optional[str] = None

    eval2_1: Decimal = Decimal("0")
    eval2_2: Decimal = Decimal("0")
    eval2_3: Decimal = Decimal("0")
    obs2: Optional[str] = None

    eval3_1: Decimal = Decimal("0")
    eval3_2: Decimal = Decimal("0")
    eval3_3: Decimal = Decimal("0")
    eval3_4: Decimal = Decimal("0")
    obs3: Optional[str] = None

    final_recommendations: Optional[str] = None
    total_score: Optional[Decimal] = None
    evaluator_id: Optional[int] = None

    @field_validator(*SCORE_FIELDS, mode="before")
    @classmethod
    def _blank_is_zero(cls, v: Any) -> Decimal:
        # form inputs arrive as "" when untouched
        return to_score(v)

    @field_validator("total_score", "evaluator_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EvaluationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int

    eval1_1: Score
    eval1_2: Score
    eval1_3: Score
    eval1_4: Score
    eval1_5: Score
    obs1: Optional[str] = None

    eval2_1: Score
    eval2_2: Score
    eval2_3: Score
    obs2: Optional[str] = None

    eval3_1: Score
    eval3_2: Score
    eval3_3: Score
    eval3_4: Score
    obs3: Optional[str] = None

    final_recommendations: Optional[str] = None
    total_score: Score
    evaluator_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
