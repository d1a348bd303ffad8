"""Form providers: the only place that talks to the Google Forms API."""

from typing import Protocol

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from formlens.auth import get_forms_credentials
from formlens.config import get_settings
from formlens.exceptions import AuthenticationError, IntegrationError, NotFoundError, RateLimitError
from formlens.models.forms import FormDetail, FormQuestion, QuestionType

FORMS_DISCOVERY_URL = "https://forms.googleapis.com/$discovery/rest?version=v1"


class FormProvider(Protocol):
    """What the engine needs from whoever holds the forms."""

    def get_form(self, form_id: str) -> FormDetail:
        ...

    def get_responses_page(self, form_id: str, page_token: str | None = None) -> tuple[list[dict], str | None]:
        """Return one page of raw responses and the next page token, if any."""
        ...

    def get_response(self, form_id: str, response_id: str) -> dict:
        ...


def _form_url(form_id: str) -> str:
    return f"https://docs.google.com/forms/d/{form_id}/edit"


def _extract_question_type(question: dict) -> QuestionType:
    """Determine the question type from the API response."""
    if "textQuestion" in question:
        if question["textQuestion"].get("paragraph", False):
            return QuestionType.PARAGRAPH
        return QuestionType.TEXT
    if "choiceQuestion" in question:
        choice_type = question["choiceQuestion"].get("type", "RADIO")
        try:
            return QuestionType(choice_type)
        except ValueError:
            return QuestionType.UNKNOWN
    if "scaleQuestion" in question:
        return QuestionType.SCALE
    if "ratingQuestion" in question:
        return QuestionType.RATING
    if "dateQuestion" in question:
        return QuestionType.DATE
    if "timeQuestion" in question:
        return QuestionType.TIME
    if "fileUploadQuestion" in question:
        return QuestionType.FILE_UPLOAD
    return QuestionType.UNKNOWN


def _option_values(options: list[dict]) -> list[str]:
    return [opt["value"] for opt in options if "value" in opt]


def _build_question(item: dict, question: dict, title: str, question_type: QuestionType | None = None) -> FormQuestion:
    scale = question.get("scaleQuestion", {})
    rating = question.get("ratingQuestion", {})
    return FormQuestion(
        question_id=question.get("questionId", ""),
        item_id=item.get("itemId", ""),
        title=title,
        description=item.get("description"),
        question_type=question_type or _extract_question_type(question),
        required=question.get("required", False),
        options=_option_values(question.get("choiceQuestion", {}).get("options", [])),
        scale_low=scale.get("low"),
        scale_high=scale.get("high"),
        low_label=scale.get("lowLabel"),
        high_label=scale.get("highLabel"),
        rating_levels=rating.get("ratingScaleLevel"),
    )


def _extract_questions(items: list[dict]) -> list[FormQuestion]:
    """Extract questions from form items, in display order.

    Grid rows of a question group become one question each, titled
    "<item title> [<row title>]" and typed by the grid's column type.
    """
    questions = []
    for item in items:
        question_item = item.get("questionItem")
        question_group = item.get("questionGroupItem")
        if question_item:
            questions.append(_build_question(item, question_item.get("question", {}), item.get("title", "")))
        elif question_group:
            columns = question_group.get("grid", {}).get("columns", {})
            column_type = _extract_question_type({"choiceQuestion": columns}) if columns else None
            for q in question_group.get("questions", []):
                row_title = q.get("rowQuestion", {}).get("title", "")
                title = f"{item.get('title', '')} [{row_title}]" if row_title else item.get("title", "")
                question = _build_question(item, q, title, column_type)
                if columns:
                    question.options = _option_values(columns.get("options", []))
                questions.append(question)
    return questions


def parse_form(form: dict) -> FormDetail:
    info = form.get("info", {})
    return FormDetail(
        id=form["formId"],
        title=info.get("title", ""),
        description=info.get("description"),
        questions=_extract_questions(form.get("items", [])),
        responder_uri=form.get("responderUri"),
        url=_form_url(form["formId"]),
    )


class GoogleFormsProvider:
    """FormProvider backed by the Google Forms REST API.

    Transient failures are retried by googleapiclient itself
    (``execute(num_retries=...)``), which re-issues the same request.
    """

    def __init__(self, account: str = "default", num_retries: int | None = None):
        self.account = account
        self.num_retries = get_settings().num_retries if num_retries is None else num_retries
        self._service = None

    def _get_service(self):
        if self._service is None:
            try:
                creds = get_forms_credentials(self.account)
            except FileNotFoundError as e:
                raise AuthenticationError(str(e)) from e
            except Exception as e:
                raise AuthenticationError(
                    f"Failed to obtain Forms credentials: {e}. Visit /auth/forms/setup?account={self.account}."
                ) from e
            self._service = build(
                "forms",
                "v1",
                credentials=creds,
                discoveryServiceUrl=FORMS_DISCOVERY_URL,
                static_discovery=False,
            )
        return self._service

    def _handle_api_error(self, e: HttpError, form_id: str, response_id: str | None = None):
        if e.resp.status == 404:
            raise NotFoundError(form_id, response_id) from e
        if e.resp.status == 429:
            raise RateLimitError("Forms API rate limit exceeded. Try again shortly.") from e
        if e.resp.status in (401, 403):
            raise AuthenticationError(
                "Forms credentials expired or revoked. Visit /auth/forms/setup to re-authenticate."
            ) from e
        raise IntegrationError(f"Forms API error: {e}") from e

    def get_form(self, form_id: str) -> FormDetail:
        service = self._get_service()
        try:
            form = service.forms().get(formId=form_id).execute(num_retries=self.num_retries)
            return parse_form(form)
        except HttpError as e:
            self._handle_api_error(e, form_id)

    def get_responses_page(self, form_id: str, page_token: str | None = None) -> tuple[list[dict], str | None]:
        service = self._get_service()
        params = {"formId": form_id}
        if page_token:
            params["pageToken"] = page_token
        try:
            result = service.forms().responses().list(**params).execute(num_retries=self.num_retries)
            return result.get("responses", []), result.get("nextPageToken")
        except HttpError as e:
            self._handle_api_error(e, form_id)

    def get_response(self, form_id: str, response_id: str) -> dict:
        service = self._get_service()
        try:
            return service.forms().responses().get(
                formId=form_id, responseId=response_id,
            ).execute(num_retries=self.num_retries)
        except HttpError as e:
            self._handle_api_error(e, form_id, response_id)
