# research_eval/core/rubric.py
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, NamedTuple, Tuple

from research_eval.core.errors import ValidationError

CENT = Decimal("0.01")
TOLERANCE = Decimal("0.005")
SCORE_FIELD_RE = re.compile(r"^eval\d+_\d+$")
LEADING_NUMBER_RE = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class Section(NamedTuple):
    number: int
    title: str
    max_points: Decimal
    fields: Tuple[str, ...]
    observation: str


RUBRIC: Tuple[Section, ...] = (
    Section(1, "Pertinencia y Relevancia", Decimal("20"),
            ("eval1_1", "eval1_2", "eval1_3", "eval1_4", "eval1_5"), "obs1"),
    Section(2, "Marco Teórico", Decimal("15"),
            ("eval2_1", "eval2_2", "eval2_3"), "obs2"),
    Section(3, "Metodología", Decimal("20"),
            ("eval3_1", "eval3_2", "eval3_3", "eval3_4"), "obs3"),
)

SCORE_FIELDS: Tuple[str, ...] = tuple(f for s in RUBRIC for f in s.fields)
OBSERVATION_FIELDS: Tuple[str, ...] = tuple(s.observation for s in RUBRIC)
MAX_TOTAL: Decimal = sum((s.max_points for s in RUBRIC), Decimal("0"))


def to_score(value: Any) -> Decimal:
    """
    parseFloat(x) || 0: the leading number of the text is used
    ("12abc" -> 12), blanks and anything without one count as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, (int, float)):
        dec = Decimal(str(value))
    else:
        m = LEADING_NUMBER_RE.match(str(value))
        if m is None:
            return Decimal("0")
        try:
            dec = Decimal(m.group(0))
        except InvalidOperation:
            return Decimal("0")
    if not dec.is_finite():
        return Decimal("0")
    return dec


def quantize(value: Any) -> Decimal:
    dec = to_score(value)
    try:
        return dec.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits for the context; the section max rejects it anyway
        return dec


def format_score(value: Any) -> str:
    return f"{quantize(value):.2f}"


def compute_total(fields: Mapping[str, Any]) -> Decimal:
    """
    Sum of every key named like a rubric sub-score (evalN_M).
    Anything else in the mapping (total_score, obs*, ids) is ignored.

    Each sub-score is rounded to cents first, as it is stored, so the
    total always equals the sum of the stored sub-scores.
    """
    total = Decimal("0.00")
    for key, value in fields.items():
        if SCORE_FIELD_RE.match(str(key)):
            total += quantize(value)
    return total


def section_totals(fields: Mapping[str, Any]) -> Dict[int, Decimal]:
    return {
        s.number: sum((quantize(fields.get(f)) for f in s.fields), Decimal("0.00"))
        for s in RUBRIC
    }


def validate_scores(fields: Mapping[str, Any]) -> Decimal:
    """
    Checks sub-scores against the rubric and returns the computed total.
    Raises ValidationError on negative scores or a section above its max.
    """
    problems: List[str] = []
    for name in SCORE_FIELDS:
        if to_score(fields.get(name)) < 0:
            problems.append(f"{name} must not be negative")

    sums = section_totals(fields)
    for s in RUBRIC:
        if sums[s.number] > s.max_points:
            problems.append(
                f"section {s.number} ({s.title}) scores {sums[s.number]} of max {s.max_points}"
            )

    if problems:
        raise ValidationError("; ".join(problems), extra={"fields": problems})
    return compute_total(fields)


def check_submitted_total(submitted: Any, computed: Decimal) -> None:
    if submitted is None or submitted == "":
        return
    if abs(to_score(submitted) - computed) > TOLERANCE:
        raise ValidationError(
            f"total_score {submitted} does not match the rubric sum {computed}",
            extra={"submitted": str(submitted), "computed": format_score(computed)},
        )
