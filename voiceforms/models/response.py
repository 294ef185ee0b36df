import uuid
from ..extensions import db
from .base import TimestampMixin


class Response(db.Model, TimestampMixin):
    __tablename__ = "responses"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    form_id = db.Column(db.String(36), db.ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    respondent_email = db.Column(db.String(254), index=True)
    respondent_meta = db.Column(db.JSON)  # {"userAgent": "...", ...}

    form = db.relationship("Form", back_populates="responses")
    answers = db.relationship("Answer", back_populates="response", cascade="all, delete-orphan")

    def to_dict(self, with_answers=False):
        out = {
            "id": self.id,
            "form_id": self.form_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "respondent_email": self.respondent_email,
            "respondent_meta": self.respondent_meta,
        }
        if with_answers:
            out["answers"] = [a.to_dict(with_question=True) for a in self.answers]
        return out
