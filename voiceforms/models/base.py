from datetime import datetime, timezone
from ..extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, server_default=db.func.now(), onupdate=utcnow)
