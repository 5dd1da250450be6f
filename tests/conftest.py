"""
Shared fixtures: in-memory SQLite engine, temp upload dir, TestClient.
Environment is set before the app is imported so the settings singleton
picks it up.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="research-eval-uploads-")
os.environ["ALLOW_LEGACY_PASSWORD"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from research_eval.core.db import get_engine
from research_eval.core.security import hash_password
from research_eval.main import app
from research_eval.models.db_models import User

PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


@pytest.fixture(autouse=True)
def _fresh_schema():
    engine = get_engine()
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(get_engine()) as s:
        yield s


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(session):
    def _make(email="evaluador@upla.cl", password="s3cret", hashed=True):
        user = User(email=email, password=hash_password(password) if (hashed and password) else None)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def project_fields():
    return {
        "category": "Tech",
        "name": "X",
        "type": "Aplicada",
        "researchers": "Ana Rojas; Luis Pérez",
        "study_program": "Ingeniería Civil Informática",
        "research_line": "Transformación digital",
        "contact_email": "ana.rojas@upla.cl",
        "general_info": "Proyecto piloto",
        "problem_description": "Baja trazabilidad de datos",
        "theoretical_framework": "Gobernanza de datos",
        "project_summary": "Plataforma de registro",
    }


@pytest.fixture
def create_project(client, project_fields):
    def _create(**overrides):
        data = {**project_fields, **overrides}
        resp = client.post("/api/projects", data=data)
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _create


def zero_scores(**overrides):
    scores = {
        "eval1_1": 0, "eval1_2": 0, "eval1_3": 0, "eval1_4": 0, "eval1_5": 0,
        "eval2_1": 0, "eval2_2": 0, "eval2_3": 0,
        "eval3_1": 0, "eval3_2": 0, "eval3_3": 0, "eval3_4": 0,
    }
    scores.update(overrides)
    return scores
