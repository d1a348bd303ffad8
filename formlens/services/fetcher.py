"""Page through a form's responses via a FormProvider."""

import logging
import time
from collections.abc import Callable

from formlens.exceptions import FetchError, NotFoundError
from formlens.models.forms import FormResponse
from formlens.services.normalizer import normalize_response
from formlens.services.provider import FormProvider

logger = logging.getLogger(__name__)

EventHook = Callable[[str, dict], None]

FETCHING_RESPONSES = "fetching responses"
FETCHING_RESPONSE = "fetching response"


def emit(on_event: EventHook | None, event: str, **fields) -> None:
    if on_event is not None:
        on_event(event, fields)


def throttle(delay: float) -> None:
    """Fixed pause before an outbound provider call."""
    if delay > 0:
        time.sleep(delay)


def fetch_page(
    provider: FormProvider,
    form_id: str,
    page_token: str | None = None,
    delay: float = 0.0,
    on_event: EventHook | None = None,
) -> tuple[list[FormResponse], str | None]:
    """Fetch and normalize a single page of responses."""
    throttle(delay)
    try:
        raw_responses, next_token = provider.get_responses_page(form_id, page_token)
    except NotFoundError:
        emit(on_event, "fetch_failed", form_id=form_id, phase=FETCHING_RESPONSES, error="not_found")
        raise
    except Exception as e:
        emit(on_event, "fetch_failed", form_id=form_id, phase=FETCHING_RESPONSES, error=str(e))
        raise FetchError(form_id, FETCHING_RESPONSES, e) from e
    return [normalize_response(raw) for raw in raw_responses], next_token or None


def fetch_all(
    provider: FormProvider,
    form_id: str,
    delay: float = 0.0,
    on_event: EventHook | None = None,
) -> list[FormResponse]:
    """Fetch every response of a form, page after page, in server order.

    No deduplication is done: whatever the provider returns is kept.
    """
    responses: list[FormResponse] = []
    page_token = None
    page = 0
    while True:
        batch, page_token = fetch_page(provider, form_id, page_token, delay=delay, on_event=on_event)
        page += 1
        responses.extend(batch)
        logger.debug("Fetched page %d of form %s (%d responses)", page, form_id, len(batch))
        emit(on_event, "page_fetched", form_id=form_id, page=page, count=len(batch))
        if not page_token:
            break
    return responses


def fetch_response(
    provider: FormProvider,
    form_id: str,
    response_id: str,
    delay: float = 0.0,
    on_event: EventHook | None = None,
) -> FormResponse:
    throttle(delay)
    try:
        raw = provider.get_response(form_id, response_id)
    except NotFoundError:
        emit(on_event, "fetch_failed", form_id=form_id, phase=FETCHING_RESPONSE, error="not_found")
        raise
    except Exception as e:
        emit(on_event, "fetch_failed", form_id=form_id, phase=FETCHING_RESPONSE, error=str(e))
        raise FetchError(form_id, FETCHING_RESPONSE, e) from e
    return normalize_response(raw)
