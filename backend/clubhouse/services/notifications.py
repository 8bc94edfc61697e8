from typing import List

from flask import current_app

from clubhouse import db, socketio
from clubhouse.errors import NotFoundError
from clubhouse.models import Notification


def notify(user_id: int, kind: str, message: str, from_user=None, player=None) -> Notification:
    """Queue a notification row on the session; the caller's commit persists it."""
    notification = Notification(
        user_id=user_id,
        type=kind,
        message=message,
        from_user=from_user,
        related_player_id=player.id if player else None,
        related_player_name=player.name if player else None,
    )
    db.session.add(notification)
    return notification


def push(notification: Notification) -> None:
    """Best-effort live delivery after commit; the stored row is the record."""
    try:
        socketio.emit('notification', notification.to_dict(),
                      to=f"user:{notification.user_id}", namespace='/ws')
    except Exception as exc:
        current_app.logger.warning(f"[notify-push-failed] user={notification.user_id} error={exc}")


def notifications_for(user_id: int) -> List[Notification]:
    return (
        Notification.query.filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def mark_read(notification_id: int, user_id: int) -> Notification:
    notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
    if notification is None:
        raise NotFoundError('Notification not found')
    notification.read = True
    db.session.commit()
    return notification
