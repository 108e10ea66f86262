# Overview: Service-layer operations for notifications; append-only feed writes and reads.

from __future__ import annotations

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..errors import Forbidden, InvalidNotification, OperationResult
from ..extensions import db
from ..models import Notification
from ..roles import Actor, NOTIFICATION_SENDER_ROLES
from .results import store_boundary


def emit_notification(
    sender: Actor,
    title: str,
    message: str,
    *,
    sender_name: str | None = None,
    sender_role: str | None = None,
    recipient_uid: str | None = None,
    recipient_role: str | None = None,
) -> OperationResult:
    """
    Fire-and-forget notification write.

    Runs in its own unit of work after the triggering operation has
    committed. Never raises: a store failure is logged and returned as a
    failed result so the caller can attach it as a warning.
    """
    if not sender.uid or not title or not message:
        return OperationResult.failed(InvalidNotification("Missing required notification fields."))

    notification = Notification(
        sender_id=sender.uid,
        sender_name=sender_name or sender.name or "System",
        sender_role=sender_role or sender.role,
        title=title,
        message=message,
        recipient_uid=recipient_uid,
        recipient_role=recipient_role,
    )
    try:
        db.session.add(notification)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to send notification %r", title)
        return OperationResult(
            success=False,
            message=f"Notification '{title}' could not be sent.",
            code="unavailable",
            status=503,
        )

    return OperationResult.ok("Notification sent successfully.", data=notification.to_dict(), status=201)


def collect_warning(warnings: list[str], result: OperationResult) -> None:
    if not result.success:
        warnings.append(result.message)


@store_boundary("send notification")
def send_notification(actor: Actor, title: str | None, message: str | None) -> OperationResult:
    """Compose-form notification, broadcast to everyone."""
    if actor.role not in NOTIFICATION_SENDER_ROLES:
        raise Forbidden("Permission denied: You are not authorized to send notifications.")

    title = (title or "").strip()
    message = (message or "").strip()
    if not title or not message:
        raise InvalidNotification("Title and message are required.")

    return emit_notification(actor, title, message)


def _visible_to(query, actor: Actor):
    return query.filter(
        or_(
            Notification.recipient_uid == actor.uid,
            Notification.recipient_role == actor.role,
            (Notification.recipient_uid.is_(None) & Notification.recipient_role.is_(None)),
        )
    )


@store_boundary("list notifications")
def list_notifications(actor: Actor | None = None, limit: int | None = None) -> OperationResult:
    q = db.session.query(Notification)
    if actor is not None:
        q = _visible_to(q, actor)
    q = q.order_by(Notification.timestamp.desc(), Notification.id.desc())
    if limit:
        q = q.limit(limit)
    notifications = [n.to_dict() for n in q.all()]
    return OperationResult.ok(f"{len(notifications)} notification(s)", data=notifications)
