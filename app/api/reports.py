from fastapi import APIRouter

from ..schemas.report import ReportSnapshot
from ..services import build_report
from .dependencies import SessionDep

router = APIRouter()


@router.get("/summary", response_model=ReportSnapshot)
async def report_summary_endpoint(session: SessionDep) -> ReportSnapshot:
    return await build_report(session)
