"""Render fetched responses as JSON or CSV text."""

import csv
import io
import json
from datetime import datetime, timezone

from formlens.exceptions import FormatError
from formlens.models.forms import ExportOptions, FormDetail, FormResponse
from formlens.services.normalizer import answer_values

EXPORT_FORMATS = ("json", "csv")
MULTI_VALUE_SEPARATOR = "; "


def check_format(format: str) -> None:
    if format not in EXPORT_FORMATS:
        raise FormatError(format)


def _export_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _column_title(form: FormDetail, question_id: str) -> str:
    question = form.find_question(question_id)
    if question is None or not question.title:
        return f"Question_{question_id}"
    return question.title


def _response_dict(response: FormResponse, include_timestamps: bool) -> dict:
    data = {"responseId": response.response_id}
    if include_timestamps:
        data["createTime"] = response.create_time
        data["lastSubmittedTime"] = response.last_submitted_time
    data["respondentEmail"] = response.respondent_email
    data["totalScore"] = response.total_score
    data = {key: value for key, value in data.items() if value is not None}
    data["answers"] = {qid: answer.model_dump(exclude_none=True) for qid, answer in response.answers.items()}
    return data


def _flatten_response(form: FormDetail, response: FormResponse, include_timestamps: bool) -> dict:
    flattened = {
        "responseId": response.response_id,
        "respondentEmail": response.respondent_email,
    }
    if include_timestamps:
        flattened["createTime"] = response.create_time
        flattened["lastSubmittedTime"] = response.last_submitted_time

    for question_id, answer in response.answers.items():
        values = answer_values(answer)
        if values is None:
            continue
        flattened[_column_title(form, question_id)] = values[0] if len(values) == 1 else values
    return {key: value for key, value in flattened.items() if value is not None}


def export_as_json(
    form: FormDetail,
    responses: list[FormResponse],
    options: ExportOptions,
    exported_at: str | None = None,
) -> str:
    data = {}
    if options.include_metadata:
        data["metadata"] = {
            "formId": form.id,
            "title": form.title,
            "description": form.description,
            "exportedAt": exported_at or _export_timestamp(),
            "totalResponses": len(responses),
        }

    if options.flatten_responses:
        data["responses"] = [_flatten_response(form, r, options.include_timestamps) for r in responses]
    else:
        data["responses"] = [_response_dict(r, options.include_timestamps) for r in responses]

    return json.dumps(data, indent=2, ensure_ascii=False)


def export_as_csv(form: FormDetail, responses: list[FormResponse], options: ExportOptions) -> str:
    """One quoted row per response, one column per declared question.

    Every field is quoted with inner quotes doubled and each row ends in
    a bare newline. Commas in question titles become semicolons.
    """
    headers = ["responseId"]
    if options.include_timestamps:
        headers += ["createTime", "lastSubmittedTime"]
    headers.append("respondentEmail")
    for question in form.questions:
        title = question.title or f"Question_{question.question_id}"
        headers.append(title.replace(",", ";"))

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)

    for response in responses:
        row = [response.response_id]
        if options.include_timestamps:
            row += [response.create_time or "", response.last_submitted_time or ""]
        row.append(response.respondent_email or "")
        for question in form.questions:
            values = answer_values(response.answers.get(question.question_id))
            row.append(MULTI_VALUE_SEPARATOR.join(values) if values is not None else "")
        writer.writerow(row)

    return buffer.getvalue()


def serialize_responses(
    form: FormDetail,
    responses: list[FormResponse],
    options: ExportOptions,
    exported_at: str | None = None,
) -> str:
    check_format(options.format)
    if options.format == "csv":
        return export_as_csv(form, responses, options)
    return export_as_json(form, responses, options, exported_at=exported_at)
