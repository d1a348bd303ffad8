from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from formlens.models.forms import ExportOptions, FormOverview, FormResponse, ResponseStats, ResponseSummary
from formlens.services import engine as engine_service

router = APIRouter(prefix="/api/forms", tags=["forms"])

MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}


@router.get("/forms/{form_id}/summary", response_model_exclude_none=True)
def response_summary(form_id: str, account: str = "default") -> ResponseSummary:
    return engine_service.get_engine(account).generate_response_summary(form_id)


@router.get("/forms/{form_id}/export")
def export_responses(
    form_id: str,
    format: str = "json",
    include_metadata: bool = True,
    include_timestamps: bool = True,
    flatten_responses: bool = True,
    account: str = "default",
) -> PlainTextResponse:
    options = ExportOptions(
        format=format,
        include_metadata=include_metadata,
        include_timestamps=include_timestamps,
        flatten_responses=flatten_responses,
    )
    content = engine_service.get_engine(account).export_responses(form_id, options)
    return PlainTextResponse(content, media_type=MEDIA_TYPES.get(format, "text/plain"))


@router.get("/forms/{form_id}/stats")
def response_stats(form_id: str, account: str = "default") -> ResponseStats:
    return engine_service.get_engine(account).response_stats(form_id)


@router.get("/forms/{form_id}/overview")
def form_overview(form_id: str, account: str = "default") -> FormOverview:
    return engine_service.get_engine(account).form_overview(form_id)


@router.get("/forms/{form_id}/responses/{response_id}")
def get_response(form_id: str, response_id: str, account: str = "default") -> FormResponse:
    return engine_service.get_engine(account).get_response(form_id, response_id)
