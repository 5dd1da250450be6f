# research_eval/core/evaluations.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select

from research_eval.core import rubric
from research_eval.core.db import guarded
from research_eval.core.errors import NotFoundError, StorageError
from research_eval.models.db_models import Evaluation, Project
from research_eval.models.schemas import EvaluationIn

logger = logging.getLogger(__name__)

# Everything the upsert overwrites on conflict
UPDATE_COLUMNS: Tuple[str, ...] = (
    rubric.SCORE_FIELDS
    + rubric.OBSERVATION_FIELDS
    + ("final_recommendations", "total_score", "evaluator_id", "updated_at")
)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(session: Session):
    name = session.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[name]
    except KeyError:
        raise StorageError("save evaluation", details=f"no upsert support for dialect {name}")


def _values(payload: EvaluationIn, total) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    values: Dict[str, Any] = {"project_id": payload.project_id}
    for name in rubric.SCORE_FIELDS:
        values[name] = rubric.quantize(getattr(payload, name))
    for name in rubric.OBSERVATION_FIELDS:
        values[name] = getattr(payload, name)
    values.update(
        final_recommendations=payload.final_recommendations,
        total_score=total,
        evaluator_id=payload.evaluator_id,
        created_at=now,
        updated_at=now,
    )
    return values


def upsert_evaluation(session: Session, payload: EvaluationIn) -> Evaluation:
    """
    INSERT ... ON CONFLICT (project_id) DO UPDATE.

    The total is recomputed from the sub-scores; a submitted total that
    disagrees with the rubric sum is rejected.
    """
    fields = payload.model_dump()
    total = rubric.validate_scores(fields)
    rubric.check_submitted_total(payload.total_score, total)

    with guarded(session, "save evaluation"):
        if session.get(Project, payload.project_id) is None:
            raise NotFoundError(f"Project {payload.project_id} not found")

        insert = _insert_for(session)
        stmt = insert(Evaluation.__table__).values(**_values(payload, total))
        stmt = stmt.on_conflict_do_update(
            index_elements=["project_id"],
            set_={col: stmt.excluded[col] for col in UPDATE_COLUMNS},
        )
        session.execute(stmt)
        session.commit()

        evaluation = session.exec(
            select(Evaluation).where(Evaluation.project_id == payload.project_id)
        ).one()
        session.refresh(evaluation)

    logger.info(
        "Evaluation saved for project %s by %s (total=%s)",
        payload.project_id, payload.evaluator_id, rubric.format_score(total),
    )
    return evaluation


def get_evaluation(session: Session, project_id: int) -> Evaluation:
    with guarded(session, "get evaluation"):
        evaluation = session.exec(
            select(Evaluation).where(Evaluation.project_id == project_id)
        ).first()
    if evaluation is None:
        raise NotFoundError(f"No evaluation saved yet for project {project_id}")
    return evaluation


def list_evaluated(session: Session) -> List[Tuple[Project, Evaluation]]:
    """Projects that have an evaluation, newest project first."""
    stmt = (
        select(Project, Evaluation)
        .join(Evaluation, Evaluation.project_id == Project.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    with guarded(session, "list evaluations"):
        return list(session.exec(stmt).all())
