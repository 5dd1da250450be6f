# research_eval/client.py
"""
Client side of the evaluation workflow.

`ApiClient` talks HTTP; `Dashboard` keeps what the browser UI kept in
globals (the logged-in user, the project being evaluated) inside explicit
`UserSession` / `EvaluationForm` objects.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from research_eval.core.pdf_report import pdf_filename, render_evaluation_pdf
from research_eval.core.rubric import (
    MAX_TOTAL,
    OBSERVATION_FIELDS,
    SCORE_FIELDS,
    compute_total,
    format_score,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
ALL_CATEGORIES = "todos"


class ApiError(Exception):
    """User-facing failure: network error or non-2xx answer."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    def __init__(self, http: httpx.Client, prefix: str = "/api"):
        self.http = http
        self.prefix = prefix.rstrip("/")

    @classmethod
    def connect(cls, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0) -> "ApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    @property
    def base_url(self) -> str:
        return str(self.http.base_url).rstrip("/")

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self.http.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ApiError("Connection error. Check that the backend server is running.") from exc

        if resp.status_code >= 400:
            try:
                body = resp.json()
                message = body.get("message") or body.get("detail") or resp.reason_phrase
            except ValueError:
                message = resp.reason_phrase
            raise ApiError(str(message), status_code=resp.status_code)
        return resp

    # --- auth ---
    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/login", json={"email": email, "password": password}).json()["user"]

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health").json()

    # --- projects ---
    def list_projects(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/projects").json()

    def get_project(self, project_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/projects/{project_id}").json()

    def create_project(
        self,
        fields: Mapping[str, Any],
        pdf: Optional[Union[str, bytes]] = None,
        filename: str = "document.pdf",
        content_type: str = "application/pdf",
    ) -> Dict[str, Any]:
        data = {k: str(v) for k, v in fields.items() if v is not None}
        files = None
        if isinstance(pdf, str):
            with open(pdf, "rb") as fh:
                files = {"file": (os.path.basename(pdf), fh.read(), content_type)}
        elif pdf is not None:
            files = {"file": (filename, pdf, content_type)}
        return self._request("POST", "/projects", data=data, files=files).json()

    def delete_project(self, project_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/projects/{project_id}").json()

    # --- evaluations ---
    def get_evaluation(self, project_id: int) -> Optional[Dict[str, Any]]:
        """None when the project has not been evaluated yet."""
        try:
            return self._request("GET", f"/evaluations/{project_id}").json()
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise

    def save_evaluation(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/evaluations", json=dict(payload)).json()

    def evaluation_pdf(self, project_id: int) -> bytes:
        return self._request("GET", f"/evaluations/{project_id}/pdf").content


@dataclass(frozen=True)
class UserSession:
    id: int
    email: str


@dataclass
class ProjectCard:
    project: Dict[str, Any]
    base_url: str = ""

    @property
    def evaluated(self) -> bool:
        return bool(self.project.get("has_evaluation"))

    @property
    def badge(self) -> str:
        if not self.evaluated:
            return ""
        return f"Evaluado ({self.project.get('total_score') or 0} pts)"

    @property
    def file_link(self) -> Optional[str]:
        url = self.project.get("file_url")
        if not url:
            return None
        return f"{self.base_url}{url}"

    def text(self) -> str:
        return " ".join(str(v) for v in self.project.values() if v is not None).lower()

    def render(self) -> List[str]:
        p = self.project
        lines = [f"[{p.get('category')}] {p.get('name')}"]
        if self.badge:
            lines.append(self.badge)
        lines += [
            f"Tipo: {p.get('type') or ''}",
            f"Investigadores: {p.get('researchers') or ''}",
            f"Programa: {p.get('study_program') or ''}",
            f"Línea: {p.get('research_line') or ''}",
            f"Contacto: {p.get('contact_email') or ''}",
        ]
        if self.file_link:
            lines.append(f"Documento: {self.file_link}")
        return lines


@dataclass
class EvaluationForm:
    project: Dict[str, Any]
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def blank(cls, project: Mapping[str, Any]) -> "EvaluationForm":
        values: Dict[str, Any] = {name: Decimal("0") for name in SCORE_FIELDS}
        values.update({name: "" for name in OBSERVATION_FIELDS})
        values["final_recommendations"] = ""
        return cls(project=dict(project), values=values)

    @classmethod
    def from_existing(cls, project: Mapping[str, Any], evaluation: Optional[Mapping[str, Any]]) -> "EvaluationForm":
        form = cls.blank(project)
        if evaluation:
            for name in SCORE_FIELDS:
                form.values[name] = evaluation.get(name) or 0
            for name in OBSERVATION_FIELDS + ("final_recommendations",):
                form.values[name] = evaluation.get(name) or ""
        return form

    @property
    def project_id(self) -> int:
        return self.project["id"]

    def set(self, name: str, value: Any) -> Decimal:
        """Updates one field and returns the recomputed total."""
        self.values[name] = value
        return self.total

    @property
    def total(self) -> Decimal:
        return compute_total(self.values)

    @property
    def total_display(self) -> str:
        return format_score(self.total)

    def payload(self, session: UserSession) -> Dict[str, Any]:
        data: Dict[str, Any] = {"project_id": self.project_id}
        for name in SCORE_FIELDS:
            value = self.values.get(name)
            data[name] = "0" if value is None or value == "" else str(value)
        for name in OBSERVATION_FIELDS + ("final_recommendations",):
            data[name] = self.values.get(name) or ""
        data["evaluator_id"] = session.id
        data["total_score"] = self.total_display
        return data


class Dashboard:
    def __init__(self, api: ApiClient):
        self.api = api
        self.session: Optional[UserSession] = None
        self.projects: List[Dict[str, Any]] = []

    def _require_session(self) -> UserSession:
        if self.session is None:
            raise ApiError("Please log in first")
        return self.session

    def login(self, email: str, password: str) -> UserSession:
        if not email or not password:
            raise ApiError("Please fill in all fields")
        user = self.api.login(email, password)
        self.session = UserSession(id=user["id"], email=user["email"])
        self.reload()
        return self.session

    def logout(self) -> None:
        self.session = None
        self.projects = []

    def reload(self) -> List[Dict[str, Any]]:
        self.projects = self.api.list_projects()
        return self.projects

    def cards(self) -> List[ProjectCard]:
        return [ProjectCard(p, base_url=self.api.base_url) for p in self.projects]

    def search(self, term: str) -> List[ProjectCard]:
        term = (term or "").lower()
        return [c for c in self.cards() if term in c.text()]

    def filter_by_category(self, category: str) -> List[ProjectCard]:
        if category == ALL_CATEGORIES:
            return self.cards()
        return [c for c in self.cards() if c.project.get("category") == category]

    def create_project(self, fields: Mapping[str, Any], pdf: Optional[Union[str, bytes]] = None) -> Dict[str, Any]:
        session = self._require_session()
        created = self.api.create_project({**fields, "user_id": session.id}, pdf=pdf)
        self.reload()
        return created

    def delete_project(self, project_id: int) -> None:
        self.api.delete_project(project_id)
        self.reload()

    def open_evaluation(self, project: Mapping[str, Any]) -> EvaluationForm:
        self._require_session()
        return EvaluationForm.from_existing(project, self.api.get_evaluation(project["id"]))

    def submit(self, form: EvaluationForm) -> Dict[str, Any]:
        session = self._require_session()
        saved = self.api.save_evaluation(form.payload(session))
        self.reload()
        return saved

    def export_pdf(self, form: EvaluationForm, directory: str = ".") -> str:
        """Writes the summary of the form as it is now (saved or not)."""
        content = render_evaluation_pdf(form.project, form.values, total=form.total)
        path = os.path.join(directory, pdf_filename(form.project.get("name")))
        with open(path, "wb") as fh:
            fh.write(content)
        logger.info("PDF exported to %s (%s / %s pts)", path, form.total_display, MAX_TOTAL)
        return path
