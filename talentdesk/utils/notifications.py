import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from talentdesk.models.users import User
from talentdesk.models.notifications import Notification

logger = logging.getLogger(__name__)

REVIEWER_ROLES = ("ADMIN", "HEAD_OF", "HEAD_OF_INFLUENCE", "HEAD_OF_SALES")


def notifier(db: Session, user_id: int, type: str, titre: str, message: str, lien: Optional[str] = None) -> Notification:
    notification = Notification(user_id=user_id, type=type, titre=titre, message=message, lien=lien)
    db.add(notification)
    return notification


def notifier_utilisateurs(
    db: Session,
    user_ids: Iterable[int],
    type: str,
    titre: str,
    message: str,
    lien: Optional[str] = None
) -> int:
    count = 0
    for user_id in set(user_ids):
        notifier(db, user_id, type, titre, message, lien)
        count += 1
    logger.info(f"{count} notification(s) {type} created")
    return count


def notifier_reviewers(
    db: Session,
    type: str,
    titre: str,
    message: str,
    lien: Optional[str] = None,
    exclude_user_id: Optional[int] = None
) -> int:
    """Notify every active reviewer (ADMIN and HEAD_OF*), except the author"""
    reviewers = db.query(User).filter(
        User.role.in_(REVIEWER_ROLES),
        User.actif == True  # noqa: E712
    ).all()
    user_ids = [user.id for user in reviewers if user.id != exclude_user_id]
    return notifier_utilisateurs(db, user_ids, type, titre, message, lien)
