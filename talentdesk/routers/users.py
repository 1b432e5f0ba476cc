import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.schemas.users import UserCreate, UserUpdate, UserResponse
from talentdesk.dependencies import get_current_active_user, check_admin_role
from talentdesk.utils.auth import hash_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Create a new user (admin only)
    """
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un utilisateur avec cet email existe déjà"
        )

    new_user = User(
        prenom=user_data.prenom,
        nom=user_data.nom,
        email=user_data.email,
        role=user_data.role.value,
        password_hash=hash_password(user_data.password),
        actif=True
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info(f"User {new_user.email} created with role {new_user.role}")
    return new_user


@router.get("", response_model=List[UserResponse])
async def get_users(
    role: Optional[str] = None,
    actif: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List users, optionally filtered by role
    """
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if actif is not None:
        query = query.filter(User.actif == actif)
    return query.order_by(User.nom, User.prenom).offset(skip).limit(limit).all()


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Update a user's name, role or activation (admin only)
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Utilisateur non trouvé"
        )

    for key, value in user_data.model_dump(exclude_unset=True).items():
        setattr(user, key, value.value if key == "role" and value is not None else value)

    db.commit()
    db.refresh(user)
    return user
