from typing import List

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.notifications import Notification
from talentdesk.schemas.notifications import NotificationResponse, NonLuesResponse
from talentdesk.dependencies import get_current_active_user

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    non_lues: bool = False,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Notifications of the current user, newest first
    """
    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if non_lues:
        query = query.filter(Notification.lu == False)  # noqa: E712
    return query.order_by(Notification.id.desc()).limit(limit).all()


@router.get("/non-lues", response_model=NonLuesResponse)
async def count_unread(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Number of unread notifications
    """
    count = db.query(Notification).filter(
        Notification.user_id == current_user.id,
        Notification.lu == False  # noqa: E712
    ).count()
    return {"count": count}


@router.post("/lire-tout")
async def mark_all_read(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Mark every notification of the current user as read
    """
    updated = db.query(Notification).filter(
        Notification.user_id == current_user.id,
        Notification.lu == False  # noqa: E712
    ).update({Notification.lu: True}, synchronize_session=False)
    db.commit()
    return {"message": "Notifications lues", "count": updated}


@router.post("/{notification_id}/lu", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Mark one notification as read
    """
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == current_user.id
    ).first()
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification non trouvée"
        )

    notification.lu = True
    db.commit()
    db.refresh(notification)
    return notification
