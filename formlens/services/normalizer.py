"""Map raw Forms API answer payloads onto the canonical Answer variants."""

from formlens.models.forms import Answer, FileRef, FileRefs, FormResponse, Grade, NoAnswer, TextValues


def normalize_answer(raw: dict | None) -> Answer:
    """Return exactly one Answer variant for a raw answer.

    Text wins over file uploads, which win over a bare grade. Anything
    empty or unrecognised becomes NoAnswer, so "not answered" stays
    distinguishable from an answer of "".
    """
    if not raw:
        return NoAnswer()

    text_answers = (raw.get("textAnswers") or {}).get("answers")
    if text_answers:
        return TextValues(values=[a.get("value", "") for a in text_answers])

    file_answers = (raw.get("fileUploadAnswers") or {}).get("answers")
    if file_answers:
        return FileRefs(files=[
            FileRef(
                file_id=f.get("fileId", ""),
                file_name=f.get("fileName", ""),
                mime_type=f.get("mimeType", ""),
            )
            for f in file_answers
        ])

    grade = raw.get("grade")
    if grade:
        feedback = grade.get("feedback") or {}
        return Grade(
            score=grade.get("score", 0),
            correct=grade.get("correct", False),
            feedback=feedback.get("text"),
        )

    return NoAnswer()


def normalize_response(raw: dict) -> FormResponse:
    return FormResponse(
        response_id=raw.get("responseId", ""),
        create_time=raw.get("createTime"),
        last_submitted_time=raw.get("lastSubmittedTime"),
        respondent_email=raw.get("respondentEmail"),
        total_score=raw.get("totalScore"),
        answers={qid: normalize_answer(answer) for qid, answer in (raw.get("answers") or {}).items()},
    )


def answer_values(answer: Answer | None) -> list[str] | None:
    """Values an answer contributes to a flat export, or None when it has none.

    File uploads export their file names.
    """
    if isinstance(answer, TextValues):
        return answer.values
    if isinstance(answer, FileRefs):
        return [f.file_name for f in answer.files]
    return None
