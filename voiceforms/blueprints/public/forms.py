from flask_wtf import FlaskForm
from wtforms import Form, StringField, TextAreaField, SelectField, FieldList, FormField
from wtforms.validators import DataRequired, Optional, Email, Length, URL


class AnswerForm(Form):
    question_id = StringField("Question", validators=[DataRequired(), Length(max=36)])
    answer_text = TextAreaField("Answer", validators=[Optional()])
    audio_url = StringField("Audio URL", validators=[Optional(), Length(max=1024)])
    transcript_text = TextAreaField("Transcript", validators=[Optional()])


class SubmitResponseForm(FlaskForm):
    answers = FieldList(FormField(AnswerForm))
    respondent_email = StringField("Email", validators=[Optional(), Email()])


class TranscribeForm(FlaskForm):
    audio_url = StringField("Audio URL", validators=[DataRequired(), URL(require_tld=False)])
    # current state of the answer slot, when the client wants it reconciled
    answer_text = TextAreaField("Answer", validators=[Optional()])
    language = StringField("Language", validators=[Optional(), Length(max=10)])


class ReconcileForm(FlaskForm):
    action = SelectField("Action", choices=[("append", "append"), ("edit", "edit"), ("remove", "remove"), ("type", "type")],
                         validators=[DataRequired()])
    combined_text = TextAreaField("Answer", validators=[Optional()])
    transcript_segment = TextAreaField("Transcript", validators=[Optional()])
    audio_reference = StringField("Audio URL", validators=[Optional(), Length(max=1024)])
    value = TextAreaField("Value", validators=[Optional()])
