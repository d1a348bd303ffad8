from fastmcp import FastMCP

from formlens.auth import _get_token_store
from formlens.exceptions import (
    AuthenticationError,
    FetchError,
    FormatError,
    IntegrationError,
    NotFoundError,
    RateLimitError,
)
from formlens.models.forms import ExportOptions
from formlens.services import engine as engine_service

mcp = FastMCP("Formlens")

HANDLED_ERRORS = (AuthenticationError, IntegrationError, RateLimitError, NotFoundError, FetchError, FormatError)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, FetchError):
        if isinstance(e.cause, (AuthenticationError, RateLimitError)):
            return {**_handle_mcp_error(e.cause), "message": str(e)}
        return {"error": "fetch_error", "message": str(e), "phase": e.phase}
    if isinstance(e, AuthenticationError):
        return {"error": "auth_error", "message": str(e), "action": "Ask user to visit the setup URL shown in the message"}
    if isinstance(e, RateLimitError):
        return {"error": "rate_limit", "message": str(e), "action": "Wait a moment and retry"}
    if isinstance(e, NotFoundError):
        return {"error": "not_found", "message": str(e), "action": "Check the form ID (and response ID)"}
    if isinstance(e, FormatError):
        return {"error": "format_error", "message": str(e)}
    if isinstance(e, IntegrationError):
        return {"error": "integration_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


# --- Forms tools ---

@mcp.tool
def forms_response_summary(form_id: str, account: str = "default") -> dict:
    """Summarize all responses to a Google Form. Returns total responses, the earliest/latest submission,
    and per-question statistics: choice distribution, scale average/median/min/max, common words in text answers,
    and each question's response rate."""
    try:
        summary = engine_service.get_engine(account).generate_response_summary(form_id)
        return summary.model_dump(exclude_none=True)
    except HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_export_responses(
    form_id: str,
    format: str = "json",
    include_metadata: bool = True,
    include_timestamps: bool = True,
    flatten_responses: bool = True,
    account: str = "default",
) -> dict:
    """Export all responses of a Google Form as JSON or CSV text.
    flatten_responses maps each answer to its question title (spreadsheet style)."""
    try:
        options = ExportOptions(
            format=format,
            include_metadata=include_metadata,
            include_timestamps=include_timestamps,
            flatten_responses=flatten_responses,
        )
        content = engine_service.get_engine(account).export_responses(form_id, options)
        return {"format": format, "content": content}
    except HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_response_stats(form_id: str, account: str = "default") -> dict:
    """Get response count, average completion time in seconds, and the submission time range of a Google Form."""
    try:
        return engine_service.get_engine(account).response_stats(form_id).model_dump()
    except HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_overview(form_id: str, account: str = "default") -> dict:
    """Get a Google Form's title, description, question count, response count and last response time."""
    try:
        return engine_service.get_engine(account).form_overview(form_id).model_dump()
    except HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_get_response(form_id: str, response_id: str, account: str = "default") -> dict:
    """Get a single response to a Google Form by its response ID, with answers keyed by question ID."""
    try:
        return engine_service.get_engine(account).get_response(form_id, response_id).model_dump()
    except HANDLED_ERRORS as e:
        return _handle_mcp_error(e)


# --- Status tool ---

@mcp.tool
def formlens_status() -> dict:
    """Check which Google accounts are authenticated for Forms access."""
    accounts = _get_token_store().list_accounts()
    return {
        "authenticated_accounts": accounts,
        "message": (
            f"{len(accounts)} account(s) ready: {', '.join(accounts)}"
            if accounts
            else "No accounts authenticated. The user should visit /auth/forms/setup"
        ),
    }
