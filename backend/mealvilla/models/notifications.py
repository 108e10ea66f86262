from __future__ import annotations

from ..extensions import db
from mealvilla.time_utils import to_utc_z


class Notification(db.Model):
    """
    Append-only notification feed entry.

    Targeting: recipient_uid and recipient_role are both optional. A row with
    neither is a broadcast visible to everyone.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_timestamp", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sender_id = db.Column(db.String(64), nullable=False)
    sender_name = db.Column(db.String(255), nullable=False, default="System")
    sender_role = db.Column(db.String(16), nullable=False)

    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)

    recipient_uid = db.Column(db.String(64), nullable=True, index=True)
    recipient_role = db.Column(db.String(16), nullable=True, index=True)

    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "sender_name": self.sender_name,
            "sender_role": self.sender_role,
            "title": self.title,
            "message": self.message,
            "recipient_uid": self.recipient_uid,
            "recipient_role": self.recipient_role,
            "timestamp": to_utc_z(self.timestamp),
        }
