from scripts.create_user import main, upsert_user
from research_eval.core.security import verify_password


def test_upsert_creates_then_resets(session):
    user = upsert_user(session, "eva@upla.cl", "primera")
    assert verify_password(user.password, "primera")

    again = upsert_user(session, "eva@upla.cl", "segunda")
    assert again.id == user.id
    assert verify_password(again.password, "segunda")
    assert not verify_password(again.password, "primera")


def test_no_password_leaves_hash_empty(session):
    assert upsert_user(session, "legacy@upla.cl", None).password is None


def test_cli_then_login(client, capsys):
    assert main(["eva@upla.cl", "--password", "clave"]) == 0
    assert "[OK]" in capsys.readouterr().out

    resp = client.post("/api/login", json={"email": "eva@upla.cl", "password": "clave"})
    assert resp.status_code == 200
