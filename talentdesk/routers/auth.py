import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.schemas.auth import Token, LoginRequest
from talentdesk.schemas.users import UserResponse
from talentdesk.utils.auth import verify_password, create_tokens
from talentdesk.dependencies import get_current_active_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou mot de passe incorrect",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.actif:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Compte désactivé"
        )

    user.last_login_at = datetime.utcnow()
    db.commit()
    return user


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 password flow, the username is the email
    """
    user = _authenticate(db, form_data.username, form_data.password)
    return create_tokens(user.id, role=user.role)


@router.post("/login", response_model=Token)
async def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """
    Login with email and password
    """
    user = _authenticate(db, login_data.email, login_data.password)
    return create_tokens(user.id, role=user.role)


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    """
    Get current user information
    """
    return current_user
