import uuid
from ..extensions import db
from .base import TimestampMixin
from ..services.question_kinds import QuestionKind


class Question(db.Model, TimestampMixin):
    __tablename__ = "questions"
    __table_args__ = (db.UniqueConstraint("form_id", "order_index", name="uq_questions_form_order"),)

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    form_id = db.Column(db.String(36), db.ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False)
    type = db.Column(db.String(20), nullable=False)
    prompt = db.Column(db.Text, nullable=False)
    required = db.Column(db.Boolean, nullable=False, default=False)
    options = db.Column(db.JSON)      # ["Red", "Blue"]
    validation = db.Column(db.JSON)   # {"min": 1, "max": 5, "pattern": "..."}

    form = db.relationship("Form", back_populates="questions")
    answers = db.relationship("Answer", back_populates="question", cascade="all, delete-orphan")

    @property
    def kind(self) -> QuestionKind:
        return QuestionKind(self.type)

    def to_dict(self):
        return {
            "id": self.id,
            "form_id": self.form_id,
            "order_index": self.order_index,
            "type": self.type,
            "prompt": self.prompt,
            "required": bool(self.required),
            "options": self.options,
            "validation": self.validation,
        }
