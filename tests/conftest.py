import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from formlens.exceptions import NotFoundError
from formlens.services.provider import parse_form


# --- Canned API responses ---

FORMS_API_FORM = {
    "formId": "form123",
    "info": {"title": "Customer Survey", "description": "Tell us how we did"},
    "responderUri": "https://docs.google.com/forms/d/e/form123/viewform",
    "items": [
        {
            "itemId": "item1",
            "title": "Favorite color",
            "questionItem": {"question": {
                "questionId": "q_color",
                "required": True,
                "choiceQuestion": {"type": "RADIO", "options": [{"value": "Red"}, {"value": "Blue"}]},
            }},
        },
        {
            "itemId": "item2",
            "title": "Toppings",
            "questionItem": {"question": {
                "questionId": "q_toppings",
                "choiceQuestion": {"type": "CHECKBOX", "options": [{"value": "Cheese"}, {"value": "Ham"}]},
            }},
        },
        {
            "itemId": "item3",
            "title": "How satisfied, overall?",
            "questionItem": {"question": {
                "questionId": "q_scale",
                "scaleQuestion": {"low": 1, "high": 5, "lowLabel": "Bad", "highLabel": "Great"},
            }},
        },
        {
            "itemId": "item4",
            "title": "Comments",
            "questionItem": {"question": {"questionId": "q_comments", "textQuestion": {"paragraph": True}}},
        },
        {
            "itemId": "item5",
            "title": "Visit date",
            "questionItem": {"question": {"questionId": "q_date", "dateQuestion": {}}},
        },
        {"itemId": "item6", "title": "Section two", "pageBreakItem": {}},
    ],
}

RESPONSE_1 = {
    "responseId": "r1",
    "createTime": "2025-01-01T10:00:00.000Z",
    "lastSubmittedTime": "2025-01-01T10:02:00.000Z",
    "respondentEmail": "alice@example.com",
    "answers": {
        "q_color": {"questionId": "q_color", "textAnswers": {"answers": [{"value": "Red"}]}},
        "q_toppings": {"questionId": "q_toppings", "textAnswers": {"answers": [{"value": "Cheese"}, {"value": "Ham"}]}},
        "q_scale": {"questionId": "q_scale", "textAnswers": {"answers": [{"value": "4"}]}},
        "q_comments": {"questionId": "q_comments", "textAnswers": {"answers": [{"value": "good service, good food"}]}},
    },
}

RESPONSE_2 = {
    "responseId": "r2",
    "createTime": "2025-01-02T09:00:00.000Z",
    "lastSubmittedTime": "2025-01-02T09:01:00.000Z",
    "answers": {
        "q_color": {"questionId": "q_color", "textAnswers": {"answers": [{"value": "Green"}]}},
        "q_scale": {"questionId": "q_scale", "textAnswers": {"answers": [{"value": "2"}]}},
        "q_removed": {"questionId": "q_removed", "textAnswers": {"answers": [{"value": "orphan"}]}},
    },
}


def make_raw_response(response_id: str, **answers: str) -> dict:
    return {
        "responseId": response_id,
        "answers": {
            qid: {"questionId": qid, "textAnswers": {"answers": [{"value": value}]}}
            for qid, value in answers.items()
        },
    }


class FakeProvider:
    """In-memory FormProvider serving canned pages: a list of (raw responses, next token)."""

    def __init__(self, form: dict = FORMS_API_FORM, pages: list[tuple[list[dict], str | None]] | None = None):
        self.form = parse_form(form)
        self.pages = pages if pages is not None else [([RESPONSE_1, RESPONSE_2], None)]
        self.page_calls: list[str | None] = []
        self.form_calls = 0

    def get_form(self, form_id):
        self.form_calls += 1
        if form_id != self.form.id:
            raise NotFoundError(form_id)
        return self.form

    def get_responses_page(self, form_id, page_token=None):
        self.page_calls.append(page_token)
        index = 0 if page_token is None else int(page_token)
        return self.pages[index]

    def get_response(self, form_id, response_id):
        for raw_responses, _ in self.pages:
            for raw in raw_responses:
                if raw["responseId"] == response_id:
                    return raw
        raise NotFoundError(form_id, response_id)


@pytest.fixture
def form():
    return parse_form(FORMS_API_FORM)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def mock_forms_credentials(mocker):
    return mocker.patch("formlens.services.provider.get_forms_credentials", return_value=MagicMock())


@pytest.fixture
def mock_forms_build(mocker):
    mock_svc = MagicMock()
    mocker.patch("formlens.services.provider.build", return_value=mock_svc)
    return mock_svc


@pytest.fixture
def mock_forms_service(mock_forms_credentials, mock_forms_build):
    """Fully mocked Forms API service."""
    return mock_forms_build


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from formlens.main import api
    return TestClient(api)
