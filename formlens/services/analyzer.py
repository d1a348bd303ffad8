"""Per-question statistics, chosen by question type.

Nothing in here raises on bad data: unparseable values are skipped and
statistics that cannot be computed are left unset.
"""

import re
from collections import Counter
from collections.abc import Callable, Iterable

from formlens.models.forms import (
    CHOICE_TYPES,
    NUMERIC_TYPES,
    TEXT_TYPES,
    Answer,
    FormQuestion,
    QuestionStatistics,
    TextValues,
)

TOP_WORDS = 10
MIN_WORD_LENGTH = 3

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_NON_WORD = re.compile(r"[^\w\s]")


def response_rate(answered: int, total: int) -> float:
    if total == 0:
        return 0
    return answered / total * 100


def _text_values(answers: Iterable[Answer]) -> Iterable[str]:
    for answer in answers:
        if isinstance(answer, TextValues):
            yield from answer.values


def parse_int(value: str | None) -> int | None:
    """Leading-integer parse: "4" -> 4, "4 stars" -> 4, "3.5" -> 3, "n/a" -> None."""
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def first_value_as_int(answer: Answer) -> int | None:
    if isinstance(answer, TextValues) and answer.values:
        return parse_int(answer.values[0])
    return None


def analyze_choices(answers: list[Answer]) -> dict[str, int]:
    """Open tally over every submitted value, including ones no longer offered."""
    return dict(Counter(value for value in _text_values(answers) if value != ""))


def analyze_numeric(answers: list[Answer], extract: Callable[[Answer], int | None] = first_value_as_int) -> dict:
    values = sorted(v for v in map(extract, answers) if v is not None)
    if not values:
        return {}

    mid = len(values) // 2
    if len(values) % 2 == 0:
        median = (values[mid - 1] + values[mid]) / 2
    else:
        median = values[mid]

    return {
        "average": sum(values) / len(values),
        "median": median,
        "min": values[0],
        "max": values[-1],
    }


def tokenize(text: str) -> list[str]:
    words = _NON_WORD.sub("", text.lower()).split()
    return [word for word in words if len(word) >= MIN_WORD_LENGTH]


def top_words(texts: Iterable[str], limit: int = TOP_WORDS) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for text in texts:
        counts.update(tokenize(text))
    # most_common is a stable sort, so ties keep first-seen order
    return dict(counts.most_common(limit))


def analyze_text(answers: list[Answer]) -> dict:
    texts = [value for value in _text_values(answers) if value != ""]
    if not texts:
        return {}
    return {
        "average_length": sum(len(text) for text in texts) / len(texts),
        "common_words": top_words(texts),
    }


def analyze_question(question: FormQuestion, answers: list[Answer], total_responses: int) -> QuestionStatistics:
    """Statistics for one question from the answers given to it."""
    fields: dict = {"response_rate": response_rate(len(answers), total_responses)}

    if question.question_type in CHOICE_TYPES:
        tally = analyze_choices(answers)
        if tally:
            fields["choice_distribution"] = tally
    elif question.question_type in NUMERIC_TYPES:
        fields.update(analyze_numeric(answers))
    elif question.question_type in TEXT_TYPES:
        fields.update(analyze_text(answers))

    return QuestionStatistics(**fields)
