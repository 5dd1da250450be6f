"""
Test: client layer driven through the in-process TestClient.
"""
import os
from decimal import Decimal

import httpx
import pytest

from conftest import PDF_BYTES
from research_eval.client import ApiClient, ApiError, Dashboard, EvaluationForm, ProjectCard, UserSession


@pytest.fixture
def api(client):
    return ApiClient(client)


@pytest.fixture
def dashboard(api, make_user):
    make_user(email="eva@upla.cl", password="clave")
    board = Dashboard(api)
    board.login("eva@upla.cl", "clave")
    return board


def test_login_creates_session(dashboard):
    assert dashboard.session.email == "eva@upla.cl"
    assert dashboard.projects == []


def test_login_requires_fields(api):
    with pytest.raises(ApiError):
        Dashboard(api).login("", "")


def test_bad_login_surfaces_message(api, make_user):
    make_user(email="eva@upla.cl", password="clave")
    with pytest.raises(ApiError) as exc:
        Dashboard(api).login("eva@upla.cl", "otra")
    assert exc.value.status_code == 401


def test_logout_clears_state(dashboard):
    dashboard.logout()
    assert dashboard.session is None
    with pytest.raises(ApiError):
        dashboard.create_project({"category": "Tech", "name": "X"})


def test_create_project_attaches_creator(dashboard, project_fields):
    created = dashboard.create_project(project_fields, pdf=PDF_BYTES)
    assert created["user_id"] == dashboard.session.id
    assert created["file_url"].startswith("/uploads/")
    assert [p["id"] for p in dashboard.projects] == [created["id"]]

    card = dashboard.cards()[0]
    assert card.file_link == f"http://testserver{created['file_url']}"
    assert card.badge == ""


def test_non_pdf_upload_is_an_api_error(dashboard, project_fields):
    with pytest.raises(ApiError) as exc:
        dashboard.api.create_project(project_fields, pdf=b"hola", filename="a.txt", content_type="text/plain")
    assert exc.value.status_code == 400


def test_blank_form_then_submit_then_badge(dashboard, project_fields):
    dashboard.create_project(project_fields)
    project = dashboard.projects[0]

    form = dashboard.open_evaluation(project)
    assert form.total == Decimal("0.00")

    assert form.set("eval1_1", "20") == Decimal("20.00")
    form.set("eval2_1", 15)
    form.set("eval3_1", "20")
    form.set("obs1", "Excelente")
    assert form.total_display == "55.00"

    saved = dashboard.submit(form)
    assert saved["total_score"] == "55.00"
    assert saved["evaluator_id"] == dashboard.session.id

    card = dashboard.cards()[0]
    assert card.evaluated
    assert card.badge == "Evaluado (55.00 pts)"
    assert card.render()[1] == card.badge


def test_reopen_prefills_existing(dashboard, project_fields):
    dashboard.create_project(project_fields)
    project = dashboard.projects[0]
    form = dashboard.open_evaluation(project)
    form.set("eval1_2", "4.5")
    form.set("final_recommendations", "Publicar")
    dashboard.submit(form)

    again = dashboard.open_evaluation(dashboard.projects[0])
    assert again.values["eval1_2"] == "4.50"
    assert again.values["final_recommendations"] == "Publicar"
    assert again.total_display == "4.50"


def test_search_and_filter(dashboard, project_fields):
    dashboard.create_project({**project_fields, "name": "Riego inteligente", "category": "Agro"})
    dashboard.create_project({**project_fields, "name": "Telemedicina", "category": "Salud"})

    assert [c.project["name"] for c in dashboard.search("RIEGO")] == ["Riego inteligente"]
    assert [c.project["name"] for c in dashboard.filter_by_category("Salud")] == ["Telemedicina"]
    assert len(dashboard.filter_by_category("todos")) == 2


def test_delete_reloads(dashboard, project_fields):
    created = dashboard.create_project(project_fields)
    dashboard.delete_project(created["id"])
    assert dashboard.projects == []
    with pytest.raises(ApiError) as exc:
        dashboard.delete_project(created["id"])
    assert exc.value.status_code == 404


def test_export_pdf_writes_file(dashboard, project_fields, tmp_path):
    dashboard.create_project(project_fields)
    form = dashboard.open_evaluation(dashboard.projects[0])
    form.set("eval1_1", 7)
    path = dashboard.export_pdf(form, str(tmp_path))
    assert os.path.basename(path).startswith("Evaluacion_X_")
    with open(path, "rb") as fh:
        assert fh.read(4) == b"%PDF"


def test_payload_carries_evaluator_and_total():
    form = EvaluationForm.blank({"id": 3, "name": "X"})
    form.set("eval2_2", "")
    form.set("eval3_3", "1.25")
    payload = form.payload(UserSession(id=5, email="e@upla.cl"))
    assert payload["project_id"] == 3
    assert payload["evaluator_id"] == 5
    assert payload["eval2_2"] == "0"
    assert payload["total_score"] == "1.25"


def test_card_without_evaluation_shows_no_badge():
    card = ProjectCard({"id": 1, "category": "Tech", "name": "X", "has_evaluation": False})
    assert card.badge == ""
    assert card.file_link is None


def test_network_failure_is_user_facing():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    api = ApiClient(httpx.Client(base_url="http://backend", transport=httpx.MockTransport(refuse)))
    with pytest.raises(ApiError) as exc:
        api.list_projects()
    assert "Connection error" in exc.value.message
    assert exc.value.status_code is None
