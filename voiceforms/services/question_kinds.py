"""Question kinds and the per-kind behaviour attached to them.

Each kind maps to a distribution strategy (how answers are counted for
analytics) and an answer validator (what a submitted value must look like).
Both tables are checked against the enum on import, so a kind added to
``QuestionKind`` without a strategy and a validator fails immediately.
"""
import math
import re
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from email_validator import validate_email, EmailNotValidError


class QuestionKind(str, Enum):
    SHORT = "short"
    LONG = "long"
    MCQ = "mcq"
    CHECKBOX = "checkbox"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    LINEAR_SCALE = "linear_scale"

    @classmethod
    def choices(cls):
        return [(k.value, k.value) for k in cls]

    @property
    def accepts_audio(self) -> bool:
        return self is QuestionKind.LONG


DEFAULT_SCALE_MIN = 1
DEFAULT_SCALE_MAX = 5


def split_checkbox(text: str):
    """Split a stored checkbox value ("Red, Blue") into its trimmed pieces."""
    return [piece.strip() for piece in text.split(",") if piece.strip()]


# --- distribution strategies -------------------------------------------------

def _count_exact(texts: Iterable[Optional[str]]) -> Dict[str, int]:
    out = {}
    for text in texts:
        if text:
            out[text] = out.get(text, 0) + 1
    return out


def _count_pieces(texts: Iterable[Optional[str]]) -> Dict[str, int]:
    out = {}
    for text in texts:
        if not text:
            continue
        for piece in split_checkbox(text):
            out[piece] = out.get(piece, 0) + 1
    return out


def _no_distribution(texts: Iterable[Optional[str]]) -> Dict[str, int]:
    return {}


DISTRIBUTIONS: Dict[QuestionKind, Callable[[Iterable[Optional[str]]], Dict[str, int]]] = {
    QuestionKind.SHORT: _no_distribution,
    QuestionKind.LONG: _no_distribution,
    QuestionKind.MCQ: _count_exact,
    QuestionKind.CHECKBOX: _count_pieces,
    QuestionKind.EMAIL: _no_distribution,
    QuestionKind.NUMBER: _no_distribution,
    QuestionKind.DATE: _no_distribution,
    QuestionKind.TIME: _no_distribution,
    # stored values are trusted here; range is enforced at submission
    QuestionKind.LINEAR_SCALE: _count_exact,
}


# --- answer validators -------------------------------------------------------
# Each validator returns an error message, or None when the value is fine.
# Empty values never reach them (required-ness is checked separately).

def _bounds(question):
    v = question.validation or {}
    return v.get("min"), v.get("max")


def _check_pattern(question, value):
    pattern = (question.validation or {}).get("pattern")
    if pattern:
        try:
            if not re.fullmatch(pattern, value):
                return "does not match the expected format"
        except re.error:
            # a broken pattern configured by the owner should not block respondents
            return None
    return None


def _check_email(question, value):
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return "is not a valid email address"
    return None


def _check_number(question, value):
    try:
        num = float(value)
    except ValueError:
        return "is not a number"
    if not math.isfinite(num):
        return "is not a number"
    lo, hi = _bounds(question)
    if lo is not None and num < lo:
        return f"must be at least {lo}"
    if hi is not None and num > hi:
        return f"must be at most {hi}"
    return None


def _check_scale(question, value):
    try:
        num = int(value)
    except ValueError:
        return "is not a whole number"
    lo, hi = _bounds(question)
    lo = DEFAULT_SCALE_MIN if lo is None else lo
    hi = DEFAULT_SCALE_MAX if hi is None else hi
    if num < lo or num > hi:
        return f"must be between {lo} and {hi}"
    return None


def _check_choice(question, value):
    if question.options and value not in question.options:
        return "is not one of the available options"
    return None


def _check_choices(question, value):
    if not question.options:
        return None
    unknown = [p for p in split_checkbox(value) if p not in question.options]
    if unknown:
        return "contains options that are not available: " + ", ".join(unknown)
    return None


def _check_date(question, value):
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return "is not a date (YYYY-MM-DD)"
    return None


def _check_time(question, value):
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            datetime.strptime(value, fmt)
            return None
        except ValueError:
            continue
    return "is not a time (HH:MM)"


VALIDATORS: Dict[QuestionKind, Callable] = {
    QuestionKind.SHORT: _check_pattern,
    QuestionKind.LONG: _check_pattern,
    QuestionKind.MCQ: _check_choice,
    QuestionKind.CHECKBOX: _check_choices,
    QuestionKind.EMAIL: _check_email,
    QuestionKind.NUMBER: _check_number,
    QuestionKind.DATE: _check_date,
    QuestionKind.TIME: _check_time,
    QuestionKind.LINEAR_SCALE: _check_scale,
}


for _table_name, _table in (("DISTRIBUTIONS", DISTRIBUTIONS), ("VALIDATORS", VALIDATORS)):
    _missing = set(QuestionKind) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} has no entry for: {sorted(k.value for k in _missing)}")


def distribution_for(kind: QuestionKind, texts: Iterable[Optional[str]]) -> Dict[str, int]:
    return DISTRIBUTIONS[QuestionKind(kind)](texts)


def validate_answer(question, value: Optional[str]) -> Optional[str]:
    """Return an error message for ``value`` or None. Empty values pass."""
    if value is None or not str(value).strip():
        return None
    return VALIDATORS[QuestionKind(question.type)](question, str(value))
