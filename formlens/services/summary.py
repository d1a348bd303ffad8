"""Fold per-question analysis and response timing into form-level reports."""

import math
import re
from datetime import datetime, timezone

from formlens.models.forms import (
    FormDetail,
    FormOverview,
    FormResponse,
    NoAnswer,
    QuestionSummary,
    ResponseStats,
    ResponseSummary,
    ResponseTimeRange,
)
from formlens.services.analyzer import analyze_question

UNTITLED_QUESTION = "Untitled Question"

_FRACTION = re.compile(r"\.(\d+)")


def summarize_responses(form: FormDetail, responses: list[FormResponse]) -> ResponseSummary:
    """Analyze every declared question, answered or not, in display order."""
    total = len(responses)
    question_summaries = []
    for question in form.questions:
        answers = [
            response.answers[question.question_id]
            for response in responses
            if question.question_id in response.answers
            and not isinstance(response.answers[question.question_id], NoAnswer)
        ]
        question_summaries.append(QuestionSummary(
            question_id=question.question_id,
            title=question.title or UNTITLED_QUESTION,
            type=question.question_type,
            response_count=len(answers),
            statistics=analyze_question(question, answers, total),
        ))

    return ResponseSummary(
        form_id=form.id,
        total_responses=total,
        question_summaries=question_summaries,
        response_time_range=response_time_range(responses),
    )


def response_time_range(responses: list[FormResponse]) -> ResponseTimeRange | None:
    """Earliest/latest submission, compared as raw ISO-8601 strings.

    Uses last-submitted time, falling back to create time. The API's
    timestamps are fixed-width UTC, so string order is time order.
    """
    times = [r.last_submitted_time or r.create_time for r in responses if r.last_submitted_time or r.create_time]
    if not times:
        return None
    return ResponseTimeRange(earliest=min(times), latest=max(times))


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp such as 2024-05-01T10:00:00.123456789Z.

    Values without an offset are taken as UTC.
    """
    if not value:
        return None
    # fromisoformat wants a numeric offset and at most microsecond precision
    text = value.strip().replace("Z", "+00:00").replace("z", "+00:00")
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def calculate_response_stats(responses: list[FormResponse]) -> ResponseStats:
    """Average completion time (create -> last submit) in whole seconds.

    Responses with a missing/unparseable timestamp or a non-positive
    duration don't count towards the average.
    """
    if not responses:
        return ResponseStats(total=0)

    durations = []
    for response in responses:
        created = parse_timestamp(response.create_time)
        submitted = parse_timestamp(response.last_submitted_time)
        if created is None or submitted is None:
            continue
        seconds = (submitted - created).total_seconds()
        if seconds > 0:
            durations.append(seconds)

    average = math.floor(sum(durations) / len(durations) + 0.5) if durations else None

    earliest = [r.create_time or r.last_submitted_time for r in responses if r.create_time or r.last_submitted_time]
    latest = [r.last_submitted_time or r.create_time for r in responses if r.last_submitted_time or r.create_time]
    time_range = ResponseTimeRange(earliest=min(earliest), latest=max(latest)) if earliest else None

    return ResponseStats(total=len(responses), average_completion_time=average, time_range=time_range)


def build_form_overview(form: FormDetail, responses: list[FormResponse]) -> FormOverview:
    last_response_time = None
    latest = None
    for response in responses:
        submitted = response.last_submitted_time or response.create_time
        instant = parse_timestamp(submitted)
        if instant is not None and (latest is None or instant > latest):
            latest, last_response_time = instant, submitted

    return FormOverview(
        form_id=form.id,
        title=form.title,
        description=form.description,
        response_count=len(responses),
        question_count=len(form.questions),
        last_response_time=last_response_time,
    )
