from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from voiceforms.errors import NoQuestionsError
from voiceforms.services.export import escape_csv_field, export_csv, export_filename


def test_escape_plain_field_untouched():
    assert escape_csv_field('hello world') == 'hello world'
    assert escape_csv_field(None) == ''


def test_escape_quotes_and_commas():
    assert escape_csv_field('He said "hi", then left') == '"He said ""hi"", then left"'
    assert escape_csv_field('a,b') == '"a,b"'
    assert escape_csv_field('line one\nline two') == '"line one\nline two"'


def test_export_filename_replaces_non_alphanumerics():
    assert export_filename('Team Lunch: 2024!') == 'Team_Lunch__2024__responses.csv'


def test_export_csv_rows():
    form = SimpleNamespace(id='f1', title='Survey')
    # given out of order on purpose
    questions = [
        SimpleNamespace(id='q2', order_index=1, prompt='Toppings'),
        SimpleNamespace(id='q1', order_index=0, prompt='Name, please'),
    ]
    newer = SimpleNamespace(
        created_at=datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc),
        respondent_email='a@example.com',
        answers=[SimpleNamespace(question_id='q1', answer_text='Ann'),
                 SimpleNamespace(question_id='q2', answer_text='Cheese, Ham')],
    )
    older = SimpleNamespace(
        created_at=datetime(2024, 3, 9, 8, 30),
        respondent_email=None,
        answers=[SimpleNamespace(question_id='q1', answer_text='Say "hi"')],
    )

    out = export_csv(form, questions, [newer, older])
    lines = out.split('\n')
    assert lines[0] == 'Timestamp,Email,"Name, please",Toppings'
    assert lines[1] == '2024-03-10T12:00:00+00:00,a@example.com,Ann,"Cheese, Ham"'
    assert lines[2] == '2024-03-09T08:30:00+00:00,,"Say ""hi""",'
    assert not out.endswith('\n')


def test_export_csv_without_questions_fails():
    form = SimpleNamespace(id='f1', title='Survey')
    with pytest.raises(NoQuestionsError):
        export_csv(form, [], [])


def test_export_csv_without_responses_is_header_only():
    form = SimpleNamespace(id='f1', title='Survey')
    questions = [SimpleNamespace(id='q1', order_index=0, prompt='Colour?')]
    assert export_csv(form, questions, []) == 'Timestamp,Email,Colour?'
