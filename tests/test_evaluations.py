"""
Test: evaluation upsert and score aggregation over /api/evaluations
"""
import pytest
from sqlalchemy import func
from sqlmodel import select

from conftest import zero_scores
from research_eval.core.rubric import SCORE_FIELDS
from research_eval.models.db_models import Evaluation


def _evaluation_count(session, project_id):
    return session.exec(
        select(func.count()).select_from(Evaluation).where(Evaluation.project_id == project_id)
    ).one()


def test_full_scenario(client, create_project, make_user):
    evaluator = make_user()
    project = create_project(category="Tech", name="X")

    listed = client.get("/api/projects").json()
    assert listed[0]["id"] == project["id"]
    assert listed[0]["has_evaluation"] is False

    payload = {
        "project_id": project["id"],
        **zero_scores(eval1_1=20, eval2_1=15, eval3_1=20),
        "obs1": "Muy pertinente",
        "obs2": "",
        "obs3": "Metodología clara",
        "final_recommendations": "Aprobar",
        "total_score": "55.00",
        "evaluator_id": evaluator.id,
    }
    resp = client.post("/api/evaluations", json=payload)
    assert resp.status_code == 200, resp.text
    saved = resp.json()
    assert saved["total_score"] == "55.00"
    assert saved["eval1_1"] == "20.00"
    assert saved["evaluator_id"] == evaluator.id

    refetched = client.get(f"/api/projects/{project['id']}").json()
    assert refetched["has_evaluation"] is True
    assert refetched["total_score"] == "55.00"


def test_resubmit_replaces(client, create_project, session):
    project = create_project()
    first = client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval1_1=3), "obs1": "v1"})
    assert first.status_code == 200
    second = client.post(
        "/api/evaluations",
        json={"project_id": project["id"], **zero_scores(eval1_2=5, eval3_4=2.5), "obs1": "v2", "evaluator_id": 9},
    )
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    assert _evaluation_count(session, project["id"]) == 1

    stored = client.get(f"/api/evaluations/{project['id']}").json()
    assert stored["eval1_1"] == "0.00"
    assert stored["eval1_2"] == "5.00"
    assert stored["eval3_4"] == "2.50"
    assert stored["obs1"] == "v2"
    assert stored["evaluator_id"] == 9
    assert stored["total_score"] == "7.50"


def test_total_is_recomputed_when_missing(client, create_project):
    project = create_project()
    resp = client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval1_1="4", eval2_3="3.5")})
    assert resp.status_code == 200
    assert resp.json()["total_score"] == "7.50"


@pytest.mark.parametrize(
    "scores,expected",
    [
        (zero_scores(eval1_5=2, eval2_2=4, eval3_3=6), "12.00"),
        ({f: "0.004" for f in SCORE_FIELDS}, "0.00"),
        ({f: "0.005" for f in SCORE_FIELDS}, "0.12"),
        (zero_scores(eval1_1="1.333", eval1_2="1.333", eval1_3="1.333"), "3.99"),
    ],
)
def test_total_always_matches_sub_scores(client, create_project, session, scores, expected):
    project = create_project()
    resp = client.post("/api/evaluations", json={"project_id": project["id"], **scores})
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_score"] == expected

    ev = session.exec(select(Evaluation).where(Evaluation.project_id == project["id"])).one()
    assert ev.total_score == sum(getattr(ev, f) for f in SCORE_FIELDS)


def test_submitted_total_is_checked_against_rounded_sub_scores(client, create_project):
    project = create_project()
    scores = {f: "0.004" for f in SCORE_FIELDS}
    resp = client.post("/api/evaluations", json={"project_id": project["id"], **scores, "total_score": "0.05"})
    assert resp.status_code == 400


def test_mismatching_total_rejected(client, create_project, session):
    project = create_project()
    resp = client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval1_1=5), "total_score": "50"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"
    assert _evaluation_count(session, project["id"]) == 0


def test_section_over_max_rejected(client, create_project):
    project = create_project()
    resp = client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval2_1=10, eval2_2=10)})
    assert resp.status_code == 400


def test_blank_form_values_count_as_zero(client, create_project):
    project = create_project()
    payload = {"project_id": project["id"], **{f: "" for f in SCORE_FIELDS}, "eval1_1": "2", "total_score": "", "evaluator_id": ""}
    resp = client.post("/api/evaluations", json=payload)
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_score"] == "2.00"
    assert resp.json()["evaluator_id"] is None


def test_unknown_project(client):
    resp = client.post("/api/evaluations", json={"project_id": 404, **zero_scores()})
    assert resp.status_code == 404


def test_missing_project_id(client):
    resp = client.post("/api/evaluations", json=zero_scores())
    assert resp.status_code == 400


def test_get_before_any_save_is_not_found(client, create_project):
    project = create_project()
    resp = client.get(f"/api/evaluations/{project['id']}")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_zero_score_is_not_absence(client, create_project):
    project = create_project()
    client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores()})
    resp = client.get(f"/api/evaluations/{project['id']}")
    assert resp.status_code == 200
    assert resp.json()["total_score"] == "0.00"
    assert client.get(f"/api/projects/{project['id']}").json()["has_evaluation"] is True


def test_has_evaluation_per_project(client, create_project):
    evaluated = create_project(name="Con evaluación")
    pending = create_project(name="Sin evaluación")
    client.post("/api/evaluations", json={"project_id": evaluated["id"], **zero_scores(eval1_1=1)})

    flags = {p["id"]: p["has_evaluation"] for p in client.get("/api/projects").json()}
    assert flags == {evaluated["id"]: True, pending["id"]: False}


def test_delete_project_removes_evaluation(client, create_project, session):
    project = create_project()
    client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval1_1=1)})
    assert client.delete(f"/api/projects/{project['id']}").status_code == 200
    assert _evaluation_count(session, project["id"]) == 0


def test_pdf_summary(client, create_project):
    project = create_project(name="Sensor de riego")
    client.post("/api/evaluations", json={"project_id": project["id"], **zero_scores(eval1_1=20), "obs1": "Bien"})
    resp = client.get(f"/api/evaluations/{project['id']}/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "Evaluacion_Sensor_de_riego_" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_pdf_without_evaluation(client, create_project):
    project = create_project()
    assert client.get(f"/api/evaluations/{project['id']}/pdf").status_code == 404
