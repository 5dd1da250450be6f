# research_eval/routers/evaluations.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from research_eval.core import evaluations as store
from research_eval.core import projects
from research_eval.core.db import get_session
from research_eval.core.pdf_report import pdf_filename, render_evaluation_pdf
from research_eval.models.schemas import EvaluationIn, EvaluationOut

router = APIRouter(prefix="/evaluations", tags=["evaluations"])


@router.post("", response_model=EvaluationOut)
def save_evaluation(payload: EvaluationIn, session: Session = Depends(get_session)):
    """
    Body:
      {
        "project_id": 1,
        "eval1_1": 4, ..., "eval3_4": 5,
        "obs1": "...", "obs2": "...", "obs3": "...",
        "final_recommendations": "...",
        "total_score": "55.00",      # optional, must match the rubric sum
        "evaluator_id": 7
      }
    Inserts, or replaces the existing evaluation of that project.
    """
    return store.upsert_evaluation(session, payload)


@router.get("/{project_id}", response_model=EvaluationOut)
def get_evaluation(project_id: int, session: Session = Depends(get_session)):
    return store.get_evaluation(session, project_id)


@router.get("/{project_id}/pdf")
def evaluation_pdf(project_id: int, session: Session = Depends(get_session)):
    project = projects.get_project(session, project_id)
    evaluation = store.get_evaluation(session, project_id)

    content = render_evaluation_pdf(
        project.model_dump(),
        evaluation.model_dump(),
        total=evaluation.total_score,
    )
    filename = pdf_filename(project.name)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
