from types import SimpleNamespace

from voiceforms.services.question_kinds import (
    QuestionKind, DISTRIBUTIONS, VALIDATORS, split_checkbox, validate_answer,
)


def q(kind, options=None, validation=None):
    return SimpleNamespace(type=kind, options=options, validation=validation, prompt='Q')


def test_every_kind_has_strategy_and_validator():
    assert set(DISTRIBUTIONS) == set(QuestionKind)
    assert set(VALIDATORS) == set(QuestionKind)


def test_only_long_accepts_audio():
    assert [k for k in QuestionKind if k.accepts_audio] == [QuestionKind.LONG]


def test_split_checkbox_trims_and_drops_blanks():
    assert split_checkbox(' Red ,Blue,, ') == ['Red', 'Blue']


def test_empty_values_always_pass():
    assert validate_answer(q('email'), '') is None
    assert validate_answer(q('number'), None) is None


def test_email_and_number():
    assert validate_answer(q('email'), 'ann@example.com') is None
    assert validate_answer(q('email'), 'not-an-email') is not None
    assert validate_answer(q('number', validation={'min': 1, 'max': 10}), '4.5') is None
    assert validate_answer(q('number', validation={'min': 1, 'max': 10}), '11') == 'must be at most 10'
    assert validate_answer(q('number'), 'ten') == 'is not a number'
    assert validate_answer(q('number'), 'nan') == 'is not a number'
    assert validate_answer(q('number', validation={'max': 10}), 'inf') == 'is not a number'
    assert validate_answer(q('number', validation={'min': 0}), '-Infinity') == 'is not a number'


def test_linear_scale_defaults_to_one_to_five():
    assert validate_answer(q('linear_scale'), '5') is None
    assert validate_answer(q('linear_scale'), '6') == 'must be between 1 and 5'
    assert validate_answer(q('linear_scale', validation={'min': 0, 'max': 10}), '9') is None


def test_choices_checked_against_options():
    colours = ['Red', 'Blue', 'Green']
    assert validate_answer(q('mcq', options=colours), 'Blue') is None
    assert validate_answer(q('mcq', options=colours), 'Pink') is not None
    assert validate_answer(q('checkbox', options=colours), 'Red, Green') is None
    assert 'Pink' in validate_answer(q('checkbox', options=colours), 'Red, Pink')


def test_date_time_and_pattern():
    assert validate_answer(q('date'), '2024-02-29') is None
    assert validate_answer(q('date'), '29/02/2024') is not None
    assert validate_answer(q('time'), '09:30') is None
    assert validate_answer(q('time'), '25:00') is not None
    assert validate_answer(q('short', validation={'pattern': r'[A-Z]{3}'}), 'ABC') is None
    assert validate_answer(q('short', validation={'pattern': r'[A-Z]{3}'}), 'abcd') is not None
