import uuid
from ..extensions import db
from .base import TimestampMixin


class Answer(db.Model, TimestampMixin):
    __tablename__ = "answers"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    response_id = db.Column(db.String(36), db.ForeignKey("responses.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = db.Column(db.String(36), db.ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    answer_text = db.Column(db.Text)
    # only used by "long" questions
    audio_url = db.Column(db.String(1024))
    transcript_text = db.Column(db.Text)

    response = db.relationship("Response", back_populates="answers")
    question = db.relationship("Question", back_populates="answers")

    def to_dict(self, with_question=False):
        out = {
            "id": self.id,
            "response_id": self.response_id,
            "question_id": self.question_id,
            "answer_text": self.answer_text,
            "audio_url": self.audio_url,
            "transcript_text": self.transcript_text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if with_question and self.question is not None:
            out["question"] = self.question.to_dict()
        return out
