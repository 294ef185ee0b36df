"""Reconciling typed text and transcribed audio inside one long answer.

A long-answer slot holds what will be submitted (``combined_text``), the most
recent machine transcript that was inserted into it (``transcript_segment``)
and the recording that transcript came from (``audio_reference``). At most one
transcript segment is live at a time; it sits after the typed text, separated
by a blank line.

Transitions never mutate a slot in place, they return a new one. A caller that
fails to upload or transcribe simply keeps the slot it had.

Locating the segment is a plain text search for its last occurrence. If the
respondent typed text that repeats the transcript verbatim, the search can pick
the wrong span; this is a known approximation, not a text diff.
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

SEPARATOR = "\n\n"


@dataclass(frozen=True)
class AnswerSlot:
    combined_text: str = ""
    transcript_segment: Optional[str] = None
    audio_reference: Optional[str] = None

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript_segment)

    def to_answer(self, question_id) -> Dict:
        """Shape expected by the submission endpoint."""
        return {
            "question_id": question_id,
            "answer_text": self.combined_text or None,
            "audio_url": self.audio_reference,
            "transcript_text": self.transcript_segment,
        }


def append_transcript(slot: AnswerSlot, transcript: str, audio_reference: Optional[str]) -> AnswerSlot:
    if not transcript:
        # nothing was heard; keep the recording, add no separator
        return AnswerSlot(slot.combined_text, None, audio_reference)
    if slot.combined_text:
        combined = slot.combined_text + SEPARATOR + transcript
    else:
        combined = transcript
    return AnswerSlot(combined, transcript, audio_reference)


def _locate_segment(text: str, segment: str):
    """Return (start, end, separated) for the segment's last occurrence, or None.

    Unless the segment is the whole text it must be preceded by the separator;
    the span then starts at the separator and ``separated`` is True.
    """
    if not segment:
        return None
    if text == segment:
        return 0, len(text), False
    idx = text.rfind(SEPARATOR + segment)
    if idx == -1:
        return None
    return idx, idx + len(SEPARATOR) + len(segment), True


def edit_transcript(slot: AnswerSlot, edited: str) -> AnswerSlot:
    if not edited:
        # clearing the transcript box drops the segment but keeps the recording
        return replace(remove_audio(slot), audio_reference=slot.audio_reference)
    span = _locate_segment(slot.combined_text, slot.transcript_segment or "")
    if span is None:
        # surrounding text changed under the segment: treat the edit as a fresh transcript
        return append_transcript(slot, edited, slot.audio_reference)
    start, end, separated = span
    text = slot.combined_text
    replacement = SEPARATOR + edited if separated else edited
    return replace(slot, combined_text=text[:start] + replacement + text[end:], transcript_segment=edited)


def remove_audio(slot: AnswerSlot) -> AnswerSlot:
    text = slot.combined_text
    span = _locate_segment(text, slot.transcript_segment or "")
    if span is not None:
        start, end, _ = span
        text = (text[:start] + text[end:]).rstrip()
    elif not slot.transcript_segment:
        # an emptied segment can leave a bare separator behind
        text = text.rstrip()
    return AnswerSlot(text, None, None)


def type_text(slot: AnswerSlot, value: str) -> AnswerSlot:
    # segment and audio are kept as-is; a later edit/remove may no longer find
    # the segment if the typed value changed it
    return replace(slot, combined_text=value or "")


TRANSITIONS = {
    "append": lambda slot, value, audio=None: append_transcript(slot, value, audio),
    "edit": lambda slot, value, audio=None: edit_transcript(slot, value),
    "remove": lambda slot, value=None, audio=None: remove_audio(slot),
    "type": lambda slot, value, audio=None: type_text(slot, value),
}


def apply_transition(slot: AnswerSlot, action: str, value: Optional[str] = None,
                     audio_reference: Optional[str] = None) -> AnswerSlot:
    try:
        fn = TRANSITIONS[action]
    except KeyError:
        raise ValueError(f"unknown transition: {action}")
    return fn(slot, value or "", audio_reference)


@dataclass
class SubmissionDraft:
    """One respondent's not-yet-submitted answers, one slot per question."""
    slots: Dict[str, AnswerSlot] = field(default_factory=dict)

    def slot(self, question_id) -> AnswerSlot:
        return self.slots.get(question_id, AnswerSlot())

    def apply(self, question_id, action: str, value: Optional[str] = None,
              audio_reference: Optional[str] = None) -> AnswerSlot:
        new = apply_transition(self.slot(question_id), action, value, audio_reference)
        self.slots[question_id] = new
        return new

    def record(self, question_id, produce) -> AnswerSlot:
        """Append the transcript produced by ``produce()``.

        ``produce`` performs upload + transcription and returns
        ``(transcript, audio_reference)``. If it raises, the slot is left
        untouched and the error propagates.
        """
        transcript, audio_reference = produce()
        return self.apply(question_id, "append", transcript, audio_reference)

    def to_answers(self, question_ids: Optional[Iterable] = None) -> List[Dict]:
        ids = list(question_ids) if question_ids is not None else list(self.slots)
        return [self.slot(qid).to_answer(qid) for qid in ids if qid in self.slots]
