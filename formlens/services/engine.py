"""Entry points used by the router and MCP tools.

Each call fetches a fresh snapshot from the provider; nothing is kept
between calls, so one engine may serve any number of forms.
"""

import logging

from formlens.config import get_settings
from formlens.exceptions import FetchError, NotFoundError
from formlens.models.forms import (
    ExportOptions,
    FormDetail,
    FormOverview,
    FormResponse,
    ResponseStats,
    ResponseSummary,
)
from formlens.services import export, fetcher, summary
from formlens.services.fetcher import EventHook
from formlens.services.provider import FormProvider, GoogleFormsProvider

logger = logging.getLogger(__name__)

FETCHING_FORM = "fetching form"


class ResponseEngine:
    def __init__(
        self,
        provider: FormProvider,
        request_delay: float | None = None,
        on_event: EventHook | None = None,
    ):
        self.provider = provider
        if request_delay is None:
            request_delay = get_settings().request_delay_ms / 1000
        self.request_delay = request_delay
        self.on_event = on_event

    def _get_form(self, form_id: str) -> FormDetail:
        fetcher.throttle(self.request_delay)
        try:
            return self.provider.get_form(form_id)
        except NotFoundError:
            fetcher.emit(self.on_event, "fetch_failed", form_id=form_id, phase=FETCHING_FORM, error="not_found")
            raise
        except Exception as e:
            fetcher.emit(self.on_event, "fetch_failed", form_id=form_id, phase=FETCHING_FORM, error=str(e))
            raise FetchError(form_id, FETCHING_FORM, e) from e

    def _fetch_all(self, form_id: str) -> list[FormResponse]:
        return fetcher.fetch_all(self.provider, form_id, delay=self.request_delay, on_event=self.on_event)

    def generate_response_summary(self, form_id: str) -> ResponseSummary:
        form = self._get_form(form_id)
        responses = self._fetch_all(form_id)
        logger.info("Summarizing %d responses for form %s", len(responses), form_id)
        return summary.summarize_responses(form, responses)

    def export_responses(self, form_id: str, options: ExportOptions | None = None) -> str:
        options = options or ExportOptions()
        export.check_format(options.format)
        form = self._get_form(form_id)
        responses = self._fetch_all(form_id)
        logger.info("Exporting %d responses for form %s as %s", len(responses), form_id, options.format)
        return export.serialize_responses(form, responses, options)

    def response_stats(self, form_id: str) -> ResponseStats:
        return summary.calculate_response_stats(self._fetch_all(form_id))

    def form_overview(self, form_id: str) -> FormOverview:
        form = self._get_form(form_id)
        return summary.build_form_overview(form, self._fetch_all(form_id))

    def get_response(self, form_id: str, response_id: str) -> FormResponse:
        return fetcher.fetch_response(
            self.provider, form_id, response_id, delay=self.request_delay, on_event=self.on_event,
        )


def get_engine(account: str = "default") -> ResponseEngine:
    """Engine backed by the Google Forms API for one authenticated account."""
    return ResponseEngine(GoogleFormsProvider(account))
