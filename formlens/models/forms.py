from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    RADIO = "RADIO"
    CHECKBOX = "CHECKBOX"
    DROP_DOWN = "DROP_DOWN"
    TEXT = "TEXT"
    PARAGRAPH = "PARAGRAPH"
    SCALE = "SCALE"
    RATING = "RATING"
    DATE = "DATE"
    TIME = "TIME"
    FILE_UPLOAD = "FILE_UPLOAD"
    UNKNOWN = "UNKNOWN"


CHOICE_TYPES = frozenset({QuestionType.RADIO, QuestionType.CHECKBOX, QuestionType.DROP_DOWN})
NUMERIC_TYPES = frozenset({QuestionType.SCALE, QuestionType.RATING})
TEXT_TYPES = frozenset({QuestionType.TEXT, QuestionType.PARAGRAPH})


class FormQuestion(BaseModel):
    question_id: str
    item_id: str
    title: str
    description: str | None = None
    question_type: QuestionType
    required: bool = False
    options: list[str] = []  # RADIO, CHECKBOX, DROP_DOWN
    scale_low: int | None = None
    scale_high: int | None = None
    low_label: str | None = None
    high_label: str | None = None
    rating_levels: int | None = None


class FormDetail(BaseModel):
    id: str
    title: str
    description: str | None = None
    questions: list[FormQuestion]
    responder_uri: str | None = None
    url: str

    def find_question(self, question_id: str) -> FormQuestion | None:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None


# --- Answers ---

class TextValues(BaseModel):
    kind: Literal["text"] = "text"
    values: list[str]


class FileRef(BaseModel):
    file_id: str
    file_name: str
    mime_type: str


class FileRefs(BaseModel):
    kind: Literal["files"] = "files"
    files: list[FileRef]


class Grade(BaseModel):
    kind: Literal["grade"] = "grade"
    score: float
    correct: bool
    feedback: str | None = None


class NoAnswer(BaseModel):
    kind: Literal["none"] = "none"


Answer = Annotated[TextValues | FileRefs | Grade | NoAnswer, Field(discriminator="kind")]


class FormResponse(BaseModel):
    response_id: str
    create_time: str | None = None
    last_submitted_time: str | None = None
    respondent_email: str | None = None
    total_score: float | None = None
    answers: dict[str, Answer] = {}


# --- Analytics ---

class QuestionStatistics(BaseModel):
    response_rate: float
    # choice questions
    choice_distribution: dict[str, int] | None = None
    # scale / rating questions
    average: float | None = None
    median: float | None = None
    min: int | None = None
    max: int | None = None
    # text questions
    average_length: float | None = None
    common_words: dict[str, int] | None = None


class QuestionSummary(BaseModel):
    question_id: str
    title: str
    type: QuestionType
    response_count: int
    statistics: QuestionStatistics


class ResponseTimeRange(BaseModel):
    earliest: str
    latest: str


class ResponseSummary(BaseModel):
    form_id: str
    total_responses: int
    question_summaries: list[QuestionSummary]
    response_time_range: ResponseTimeRange | None = None


class ResponseStats(BaseModel):
    total: int
    average_completion_time: int | None = None  # seconds
    time_range: ResponseTimeRange | None = None


class FormOverview(BaseModel):
    form_id: str
    title: str
    description: str | None = None
    response_count: int
    question_count: int
    last_response_time: str | None = None


# --- Export ---

class ExportOptions(BaseModel):
    format: str = "json"  # json or csv
    include_metadata: bool = True
    include_timestamps: bool = True
    flatten_responses: bool = True
