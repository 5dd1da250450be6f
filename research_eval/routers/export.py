from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from sqlmodel import Session

from research_eval.core.db import get_session
from research_eval.core.evaluations import list_evaluated
from research_eval.core.rubric import OBSERVATION_FIELDS, SCORE_FIELDS

router = APIRouter(prefix="/export", tags=["export"])

HEADERS: List[str] = (
    ["project_id", "name", "category", "researchers", "study_program"]
    + list(SCORE_FIELDS)
    + ["total_score"]
    + list(OBSERVATION_FIELDS)
    + ["final_recommendations", "evaluator_id", "updated_at"]
)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # openpyxl refuses tz-aware datetimes
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@router.get("/evaluations.xlsx")
def export_evaluations_xlsx(session: Session = Depends(get_session)):
    wb = Workbook()
    ws = wb.active
    ws.title = "evaluations"

    ws.append(HEADERS)

    for project, ev in list_evaluated(session):
        ws.append(
            [project.id, project.name, project.category, project.researchers or "", project.study_program or ""]
            + [float(getattr(ev, f)) for f in SCORE_FIELDS]
            + [float(ev.total_score)]
            + [getattr(ev, f) or "" for f in OBSERVATION_FIELDS]
            + [ev.final_recommendations or "", ev.evaluator_id, _naive_utc(ev.updated_at)]
        )

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    now = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return StreamingResponse(stream, media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                             headers={"Content-Disposition": f"attachment; filename=evaluations_{now}.xlsx"})
