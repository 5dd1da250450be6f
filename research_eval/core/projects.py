# research_eval/core/projects.py
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlmodel import Session, select

from research_eval.core.db import guarded
from research_eval.core.errors import NotFoundError
from research_eval.models.db_models import Evaluation, Project
from research_eval.models.schemas import ProjectOut

logger = logging.getLogger(__name__)

PROJECT_FIELDS = (
    "category", "name", "type", "researchers", "study_program",
    "research_line", "contact_email", "general_info",
    "problem_description", "theoretical_framework", "project_summary",
)


def _augmented():
    # LEFT JOIN evaluations -> total_score + has_evaluation
    return (
        select(Project, Evaluation.total_score, Evaluation.id)
        .outerjoin(Evaluation, Evaluation.project_id == Project.id)
    )


def _to_out(project: Project, total_score, evaluation_id) -> ProjectOut:
    return ProjectOut(
        **project.model_dump(),
        total_score=total_score,
        has_evaluation=evaluation_id is not None,
    )


def create_project(
    session: Session,
    fields: Mapping[str, Any],
    file_url: Optional[str] = None,
    creator_id: Optional[int] = None,
) -> Project:
    data = {k: fields.get(k) for k in PROJECT_FIELDS}
    project = Project(**data, file_url=file_url, user_id=creator_id)
    with guarded(session, "create project"):
        session.add(project)
        session.commit()
        session.refresh(project)
    logger.info("Project %s created by user %s (file=%s)", project.id, creator_id, bool(file_url))
    return project


def list_projects(session: Session) -> List[ProjectOut]:
    stmt = _augmented().order_by(Project.created_at.desc(), Project.id.desc())
    with guarded(session, "list projects"):
        rows = session.exec(stmt).all()
    return [_to_out(p, total, eid) for (p, total, eid) in rows]


def get_project(session: Session, project_id: int) -> ProjectOut:
    with guarded(session, "get project"):
        row = session.exec(_augmented().where(Project.id == project_id)).first()
    if row is None:
        raise NotFoundError(f"Project {project_id} not found")
    project, total, eid = row
    return _to_out(project, total, eid)


def delete_project(session: Session, project_id: int) -> None:
    """Deletes the project and its evaluation. Not idempotent."""
    with guarded(session, "delete project"):
        project = session.get(Project, project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        evaluation = session.exec(
            select(Evaluation).where(Evaluation.project_id == project_id)
        ).first()
        if evaluation is not None:
            session.delete(evaluation)
        session.delete(project)
        session.commit()
    logger.info("Project %s deleted", project_id)
