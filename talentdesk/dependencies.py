from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from talentdesk.config import settings
from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.schemas.auth import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

ADMIN_ROLES = {"ADMIN"}
REVIEWER_ROLES = {"ADMIN", "HEAD_OF", "HEAD_OF_INFLUENCE", "HEAD_OF_SALES"}
DOCUMENT_SENDER_ROLES = {"ADMIN", "HEAD_OF", "HEAD_OF_INFLUENCE"}
TARIF_MANAGER_ROLES = {"ADMIN", "HEAD_OF"}
DOCUMENT_CREATOR_ROLES = REVIEWER_ROLES | {"TM"}


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
):
    """
    Get the current authenticated user based on JWT token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Non authentifié",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        # Decode JWT token, expiration is checked by jose
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )

        user_id = payload.get("sub")
        token_type = payload.get("type")

        if user_id is None:
            raise credentials_exception
        if token_type != "access_token":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Type de token invalide",
                headers={"WWW-Authenticate": "Bearer"},
            )

        token_data = TokenData(user_id=int(user_id))
    except (JWTError, ValueError):
        raise credentials_exception

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
):
    """
    Get the current active user (checks if account is active)
    """
    if not current_user.actif:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Compte désactivé"
        )
    return current_user


def require_roles(roles, detail: str = "Accès non autorisé"):
    """Build a dependency that only lets the given roles through"""
    async def check_role(current_user: User = Depends(get_current_active_user)):
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail
            )
        return current_user
    return check_role


check_admin_role = require_roles(ADMIN_ROLES, "Accès réservé aux administrateurs")
check_reviewer_role = require_roles(REVIEWER_ROLES, "Accès réservé aux administrateurs / Head Of")
check_document_sender_role = require_roles(DOCUMENT_SENDER_ROLES, "Vous n'êtes pas autorisé à envoyer ce document")
check_tarif_manager_role = require_roles(TARIF_MANAGER_ROLES, "Accès réservé aux administrateurs / Head Of")
check_document_creator_role = require_roles(DOCUMENT_CREATOR_ROLES, "Vous n'êtes pas autorisé à créer des documents")


def is_reviewer(user: User) -> bool:
    return user.role in REVIEWER_ROLES
