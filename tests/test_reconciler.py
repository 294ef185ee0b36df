import pytest

from voiceforms.services.reconciler import (
    AnswerSlot, SubmissionDraft, append_transcript, edit_transcript, remove_audio, type_text, apply_transition,
)

AUDIO = 'http://testserver/storage/audio/forms/f/responses/temp-1/q.webm'


def test_append_on_empty_text():
    slot = append_transcript(AnswerSlot(''), 'hello world', AUDIO)
    assert slot.combined_text == 'hello world'
    assert slot.transcript_segment == 'hello world'
    assert slot.audio_reference == AUDIO


def test_append_after_typed_text():
    slot = append_transcript(AnswerSlot('typed note'), 'hello', AUDIO)
    assert slot.combined_text == 'typed note\n\nhello'


def test_remove_restores_typed_text():
    slot = remove_audio(append_transcript(AnswerSlot('typed note'), 'hello', AUDIO))
    assert slot == AnswerSlot('typed note', None, None)


def test_remove_when_transcript_is_everything():
    slot = remove_audio(append_transcript(AnswerSlot(''), 'hello', AUDIO))
    assert slot.combined_text == ''
    assert not slot.has_transcript


def test_edit_replaces_only_the_segment():
    slot = AnswerSlot('typed note\n\nhello', 'hello', AUDIO)
    out = edit_transcript(slot, 'hi there')
    assert out.combined_text == 'typed note\n\nhi there'
    assert out.transcript_segment == 'hi there'
    assert out.audio_reference == AUDIO


def test_edit_prefers_last_occurrence():
    # the respondent typed the same words before recording them
    slot = append_transcript(AnswerSlot('hello'), 'hello', AUDIO)
    out = edit_transcript(slot, 'hello there')
    assert out.combined_text == 'hello\n\nhello there'


def test_edit_falls_back_to_append_when_segment_is_gone():
    slot = AnswerSlot('typed note\n\nhello', 'hello', AUDIO)
    slot = type_text(slot, 'typed note hello')
    out = edit_transcript(slot, 'hi')
    assert out.combined_text == 'typed note hello\n\nhi'
    assert out.transcript_segment == 'hi'


def test_type_keeps_segment_and_audio():
    slot = AnswerSlot('typed note\n\nhello', 'hello', AUDIO)
    out = type_text(slot, 'typed note\n\nhello!')
    assert out.combined_text == 'typed note\n\nhello!'
    assert out.transcript_segment == 'hello'
    assert out.audio_reference == AUDIO


def test_remove_after_desynchronising_type_keeps_text():
    # the segment can no longer be found, so the text is left alone
    slot = type_text(AnswerSlot('note\n\nhello', 'hello', AUDIO), 'note\n\nhullo')
    out = remove_audio(slot)
    assert out.combined_text == 'note\n\nhullo'
    assert out.audio_reference is None


def test_second_recording_replaces_live_segment_after_remove():
    slot = append_transcript(AnswerSlot('intro'), 'first take', AUDIO)
    slot = remove_audio(slot)
    slot = append_transcript(slot, 'second take', AUDIO + '2')
    assert slot.combined_text == 'intro\n\nsecond take'
    assert slot.combined_text.count('take') == 1


def test_slots_are_immutable():
    slot = AnswerSlot('a')
    with pytest.raises(AttributeError):
        slot.combined_text = 'b'


def test_apply_transition_unknown_action():
    with pytest.raises(ValueError):
        apply_transition(AnswerSlot(), 'shout', 'x')


def test_draft_record_failure_leaves_slot():
    draft = SubmissionDraft()
    draft.apply('q1', 'type', 'typed note')

    def failing_upload():
        raise RuntimeError('upload failed')

    with pytest.raises(RuntimeError):
        draft.record('q1', failing_upload)
    assert draft.slot('q1') == AnswerSlot('typed note')

    draft.record('q1', lambda: ('hello', AUDIO))
    assert draft.slot('q1').combined_text == 'typed note\n\nhello'
    assert draft.to_answers() == [{
        'question_id': 'q1',
        'answer_text': 'typed note\n\nhello',
        'audio_url': AUDIO,
        'transcript_text': 'hello',
    }]


def test_draft_to_answers_skips_untouched_questions():
    draft = SubmissionDraft()
    draft.apply('q2', 'type', 'only this')
    assert [a['question_id'] for a in draft.to_answers(['q1', 'q2'])] == ['q2']


def test_clearing_transcript_drops_separator_and_keeps_audio():
    slot = edit_transcript(append_transcript(AnswerSlot('typed note'), 'hello', AUDIO), '')
    assert slot.combined_text == 'typed note'
    assert not slot.has_transcript
    assert slot.audio_reference == AUDIO

    assert remove_audio(slot).combined_text == 'typed note'
    again = edit_transcript(slot, 'hi')
    assert again.combined_text == 'typed note\n\nhi'
    assert again.transcript_segment == 'hi'


def test_remove_trims_bare_separator_left_by_empty_segment():
    slot = AnswerSlot('typed note\n\n', '', AUDIO)
    assert remove_audio(slot) == AnswerSlot('typed note', None, None)


def test_empty_transcript_adds_no_separator():
    slot = append_transcript(AnswerSlot('typed note'), '', AUDIO)
    assert slot.combined_text == 'typed note'
    assert slot.audio_reference == AUDIO
