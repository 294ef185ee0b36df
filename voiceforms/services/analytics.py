"""Per-form response analytics.

Pure functions over already-fetched rows. Nothing here touches the database;
``build_form_analytics`` takes the form, its questions, its responses and
their answers and returns the JSON-ready payload served by the analytics view.
Rows only need the attributes used below (``created_at``, ``respondent_email``,
``question_id``, ``answer_text``, ``type``), so plain objects work in tests.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from .question_kinds import QuestionKind, distribution_for

DAY = timedelta(days=1)


def as_utc(ts: datetime) -> datetime:
    # sqlite hands back naive datetimes; they are stored as UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now is not None else datetime.now(timezone.utc)


def summarize(responses, now: Optional[datetime] = None) -> Dict:
    """Totals and timing for a form's responses.

    With no responses every time-based field is None and ``avg_per_day`` is 0.
    """
    responses = list(responses)
    total = len(responses)
    emails = {r.respondent_email for r in responses if r.respondent_email}
    if total == 0:
        return {
            "total": 0,
            "first_timestamp": None,
            "last_timestamp": None,
            "unique_respondent_count": 0,
            "avg_per_day": 0,
        }

    stamps = [as_utc(r.created_at) for r in responses]
    first, last = min(stamps), max(stamps)
    days = max(1, math.ceil((_now(now) - first) / DAY))
    return {
        "total": total,
        "first_timestamp": first,
        "last_timestamp": last,
        "unique_respondent_count": len(emails),
        "avg_per_day": total / days,
    }


def bucket_by_day(responses, window_days: int = 30, now: Optional[datetime] = None) -> List[Tuple[str, int]]:
    """Count responses per UTC calendar day over the trailing window.

    Returned pairs are ``(YYYY-MM-DD, count)`` sorted ascending by date.
    """
    cutoff = _now(now) - timedelta(days=window_days)
    counts: Dict[str, int] = {}
    for r in responses:
        ts = as_utc(r.created_at)
        if ts < cutoff:
            continue
        key = ts.date().isoformat()
        counts[key] = counts.get(key, 0) + 1
    return sorted(counts.items())


def question_distribution(question, answers: Iterable, total_responses: int) -> Dict:
    answers = list(answers)
    answered = len(answers)
    completion = (answered / total_responses) * 100 if total_responses > 0 else 0.0
    return {
        "answered_count": answered,
        "skipped_count": total_responses - answered,
        "completion_rate": float(completion),
        "distribution": distribution_for(QuestionKind(question.type), (a.answer_text for a in answers)),
    }


def _iso(ts):
    return ts.isoformat() if ts is not None else None


def build_form_analytics(form, questions, responses, answers, now=None, window_days=30) -> Dict:
    """Assemble the analytics payload for one form.

    ``responses`` is expected newest-first (the order the view fetches them);
    nothing here depends on it except that it is passed through unchanged.
    """
    responses = list(responses)
    summary = summarize(responses, now=now)
    by_question: Dict[str, list] = {}
    for a in answers:
        by_question.setdefault(a.question_id, []).append(a)

    question_analytics = []
    for q in questions:
        stats = question_distribution(q, by_question.get(q.id, []), summary["total"])
        question_analytics.append({
            "question_id": q.id,
            "prompt": q.prompt,
            "type": q.type,
            **stats,
        })

    series = bucket_by_day(responses, window_days=window_days, now=now)
    return {
        "form_id": form.id,
        "form_title": form.title,
        "total_responses": summary["total"],
        "first_response": _iso(summary["first_timestamp"]),
        "last_response": _iso(summary["last_timestamp"]),
        "unique_respondents": summary["unique_respondent_count"],
        "avg_responses_per_day": summary["avg_per_day"],
        "window_days": window_days,
        "responses_by_date": [{"date": d, "count": c} for d, c in series],
        "question_analytics": question_analytics,
    }
