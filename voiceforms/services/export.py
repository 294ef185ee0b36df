import re
from typing import Iterable, List

from .analytics import as_utc
from ..errors import NoQuestionsError

_SPECIAL = (",", '"', "\n")


def escape_csv_field(value) -> str:
    """Quote a field only when it contains a comma, a double quote or a newline."""
    text = "" if value is None else str(value)
    if any(ch in text for ch in _SPECIAL):
        return '"' + text.replace('"', '""') + '"'
    return text


def _row(fields: Iterable) -> str:
    return ",".join(escape_csv_field(f) for f in fields)


def export_filename(title: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", title or "", flags=re.IGNORECASE) + "_responses.csv"


def export_csv(form, questions, responses) -> str:
    """Render responses as CSV text.

    Columns are Timestamp, Email and one per question ordered by
    ``order_index``. Rows keep the order of ``responses`` (newest first as
    fetched). Checkbox values are written as stored, not re-split.
    """
    ordered = sorted(questions, key=lambda q: q.order_index)
    if not ordered:
        raise NoQuestionsError()

    lines: List[str] = [_row(["Timestamp", "Email"] + [q.prompt for q in ordered])]
    for resp in responses:
        by_question = {a.question_id: a for a in (resp.answers or [])}
        row = [as_utc(resp.created_at).isoformat(), resp.respondent_email or ""]
        for q in ordered:
            answer = by_question.get(q.id)
            row.append((answer.answer_text or "") if answer is not None else "")
        lines.append(_row(row))
    return "\n".join(lines)
