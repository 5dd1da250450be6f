# research_eval/core/pdf_report.py
"""Evaluation summary rendered with reportlab, one page unless the text runs long."""
from __future__ import annotations

import re
import time
from io import BytesIO
from typing import Any, Mapping, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from research_eval.core.rubric import MAX_TOTAL, RUBRIC, compute_total, format_score

# lines below this start a new page
BOTTOM_MARGIN = 20 * mm


def _wrap(text: str, width: int = 90):
    line = ""
    for word in text.split():
        if len(line) + len(word) < width:
            line += word + " "
        else:
            yield line.rstrip()
            line = word + " "
    if line:
        yield line.rstrip()


def render_evaluation_pdf(
    project: Mapping[str, Any],
    scores: Mapping[str, Any],
    total: Optional[Any] = None,
) -> bytes:
    """
    Title, project metadata, every rubric line and the final total.
    `total` defaults to the rubric sum of `scores`. Long observations
    continue on a new page instead of running past the bottom margin.
    """
    if total is None:
        total = compute_total(scores)

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    width, height = A4
    left = 20 * mm
    top = height - 15 * mm
    y = top
    font = ("Helvetica", 12)

    def set_font(name: str, size: int) -> None:
        nonlocal font
        font = (name, size)
        c.setFont(name, size)

    def line(x: float, text: str, step: float) -> None:
        nonlocal y
        if y < BOTTOM_MARGIN:
            c.showPage()
            c.setFont(*font)
            y = top
        c.drawString(x, y, text)
        y -= step

    c.setTitle(f"Evaluacion {project.get('name') or ''}".strip())

    set_font("Helvetica-Bold", 16)
    c.drawCentredString(width / 2, y, "EVALUACIÓN DE PROYECTO")
    y -= 15 * mm

    set_font("Helvetica", 12)
    for label, key in (("Proyecto", "name"), ("Categoría", "category"), ("Investigadores", "researchers")):
        line(left, f"{label}: {project.get(key) or ''}", 10 * mm)
    y -= 5 * mm

    for section in RUBRIC:
        set_font("Helvetica-Bold", 11)
        line(left, f"{section.number}. {section.title} ({section.max_points} pts)", 7 * mm)
        set_font("Helvetica", 11)
        for field in section.fields:
            number = field[len("eval"):].replace("_", ".")
            line(left + 5 * mm, f"{number}: {format_score(scores.get(field))} pts", 6 * mm)

        obs = scores.get(section.observation)
        if obs:
            set_font("Helvetica-Oblique", 10)
            for text in _wrap(f"Observaciones: {obs}"):
                line(left + 5 * mm, text, 5 * mm)
        y -= 4 * mm

    recommendations = scores.get("final_recommendations")
    if recommendations:
        set_font("Helvetica-Oblique", 10)
        for text in _wrap(f"Recomendaciones finales: {recommendations}"):
            line(left, text, 5 * mm)
        y -= 4 * mm

    set_font("Helvetica-Bold", 14)
    line(left, f"PUNTAJE TOTAL: {format_score(total)} / {MAX_TOTAL} pts", 0)

    c.showPage()
    c.save()
    return buf.getvalue()


def pdf_filename(project_name: Optional[str]) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", project_name or "proyecto").strip("_") or "proyecto"
    return f"Evaluacion_{safe}_{int(time.time() * 1000)}.pdf"
