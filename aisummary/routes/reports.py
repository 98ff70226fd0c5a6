from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..logging_config import logger
from ..models import ReportRequest, ReportResponse, ReportStatusResponse
from ..services import ReportGenerator, ReportInProgressError
from .dependencies import get_report_generator

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    response_model=ReportResponse,
    responses={409: {"description": "A report is already being generated"}},
    summary="Generate a report from the daily entries",
)
# Failures of the remote model come back as ok=false, not as an HTTP error
async def create_report(
    payload: ReportRequest,
    generator: ReportGenerator = Depends(get_report_generator),
) -> ReportResponse:
    try:
        outcome = await generator.generate(
            payload.kind,
            mode=payload.mode,
            since=payload.since,
            until=payload.until,
            current_period=payload.current_period,
            save_as_entry=payload.save_as_entry,
        )
    except ReportInProgressError as exc:
        logger.info("report request rejected; generation in progress")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    return ReportResponse(
        ok=outcome.ok,
        kind=outcome.kind,
        mode=outcome.mode,
        message=outcome.message,
        text=outcome.text,
        path=outcome.path,
        entry_id=outcome.entry_id,
        entry_count=outcome.entry_count,
    )


@router.get("/status", response_model=ReportStatusResponse)
def report_status(generator: ReportGenerator = Depends(get_report_generator)) -> ReportStatusResponse:
    return ReportStatusResponse(busy=generator.busy)


__all__ = ["router"]
