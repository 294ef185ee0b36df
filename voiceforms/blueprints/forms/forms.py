from flask_wtf import FlaskForm
from wtforms import Form, StringField, TextAreaField, BooleanField, IntegerField, FloatField, SelectField, FieldList, FormField
from wtforms.validators import DataRequired, InputRequired, Optional, Length, NumberRange, ValidationError

from ...services.question_kinds import QuestionKind


class SettingsForm(Form):
    collect_email = BooleanField("Collect email")
    limit_one_response = BooleanField("Limit to one response")
    show_progress_bar = BooleanField("Show progress bar")
    confirmation_message = TextAreaField("Confirmation message", validators=[Optional(), Length(max=2000)])


class FormMetaForm(FlaskForm):
    title = StringField("Title", validators=[DataRequired(message="Title is required"), Length(max=255)])
    description = TextAreaField("Description", validators=[Optional()])
    published = BooleanField("Published", default=False)
    settings = FormField(SettingsForm)


class ValidationRulesForm(Form):
    min = FloatField("Min", validators=[Optional()])
    max = FloatField("Max", validators=[Optional()])
    pattern = StringField("Pattern", validators=[Optional(), Length(max=500)])

    def validate_max(self, field):
        if field.data is not None and self.min.data is not None and field.data < self.min.data:
            raise ValidationError("max must not be smaller than min")


class QuestionForm(Form):
    id = StringField("Id", validators=[Optional(), Length(max=36)])
    order_index = IntegerField("Order", validators=[InputRequired(), NumberRange(min=0)])
    type = SelectField("Type", choices=QuestionKind.choices(), validators=[InputRequired()])
    prompt = StringField("Prompt", validators=[DataRequired(message="Question prompt is required")])
    required = BooleanField("Required", default=False)
    options = FieldList(StringField("Option"))
    validation = FormField(ValidationRulesForm)


class QuestionsForm(FlaskForm):
    questions = FieldList(FormField(QuestionForm))

    def validate_questions(self, field):
        seen = set()
        for entry in field.entries:
            idx = entry.form.order_index.data
            if idx in seen:
                raise ValidationError(f"order_index {idx} is used more than once")
            seen.add(idx)
