import uuid
from ..extensions import db
from .base import TimestampMixin


def _new_id():
    return str(uuid.uuid4())


class Form(db.Model, TimestampMixin):
    __tablename__ = "forms"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    published = db.Column(db.Boolean, nullable=False, default=False)
    # {"collect_email", "limit_one_response", "show_progress_bar", "confirmation_message"}
    settings = db.Column(db.JSON)

    owner = db.relationship("User", back_populates="forms")
    questions = db.relationship(
        "Question", back_populates="form", cascade="all, delete-orphan",
        order_by="Question.order_index",
    )
    responses = db.relationship("Response", back_populates="form", cascade="all, delete-orphan")

    def setting(self, key, default=None):
        return (self.settings or {}).get(key, default)

    def is_owned_by(self, user):
        return user is not None and getattr(user, "id", None) == self.owner_id

    def to_dict(self, with_questions=False):
        out = {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "published": bool(self.published),
            "settings": self.settings,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if with_questions:
            out["questions"] = [q.to_dict() for q in self.questions]
        return out

    def __repr__(self) -> str:
        return f"<Form id={self.id} title={self.title!r}>"
