# research_eval/routers/projects.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from research_eval.core import projects as store
from research_eval.core.errors import StorageError
from research_eval.core.uploads import has_file, remove_upload, save_pdf
from research_eval.core.db import get_session
from research_eval.models.schemas import MessageOut, ProjectOut

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectOut])
def list_projects(session: Session = Depends(get_session)):
    return store.list_projects(session)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, session: Session = Depends(get_session)):
    return store.get_project(session, project_id)


@router.post("", response_model=ProjectOut)
async def create_project(
    category: str = Form(...),
    name: str = Form(...),
    type: Optional[str] = Form(None),
    researchers: Optional[str] = Form(None),
    study_program: Optional[str] = Form(None),
    research_line: Optional[str] = Form(None),
    contact_email: Optional[str] = Form(None),
    general_info: Optional[str] = Form(None),
    problem_description: Optional[str] = Form(None),
    theoretical_framework: Optional[str] = Form(None),
    project_summary: Optional[str] = Form(None),
    user_id: Optional[int] = Form(None),
    file: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
):
    """
    multipart/form-data; the optional `file` part must be a PDF.
    A rejected upload creates no row.
    """
    fields = {
        "category": category,
        "name": name,
        "type": type,
        "researchers": researchers,
        "study_program": study_program,
        "research_line": research_line,
        "contact_email": contact_email,
        "general_info": general_info,
        "problem_description": problem_description,
        "theoretical_framework": theoretical_framework,
        "project_summary": project_summary,
    }

    file_url = None
    if has_file(file):
        file_url = await save_pdf(file)

    try:
        project = store.create_project(session, fields, file_url=file_url, creator_id=user_id)
    except StorageError:
        remove_upload(file_url)
        raise

    return store.get_project(session, project.id)


@router.delete("/{project_id}", response_model=MessageOut)
def delete_project(project_id: int, session: Session = Depends(get_session)):
    store.delete_project(session, project_id)
    return MessageOut(success=True, message="Project deleted")
