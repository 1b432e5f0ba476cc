import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.talents import Talent, TalentTarifs
from talentdesk.schemas.talents import (
    TalentCreate, TalentUpdate, TalentResponse, TalentListResponse,
    TarifsBase, TarifsResponse, TarifSuggereResponse
)
from talentdesk.dependencies import (
    get_current_active_user, check_admin_role, check_reviewer_role,
    check_tarif_manager_role, is_reviewer
)
from talentdesk.utils.tarifs import get_tarif_suggere

logger = logging.getLogger(__name__)

router = APIRouter()


def get_talent_or_404(db: Session, talent_id: int) -> Talent:
    talent = db.query(Talent).filter(Talent.id == talent_id).first()
    if not talent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Talent non trouvé"
        )
    return talent


def _check_manager(db: Session, manager_id: Optional[int]) -> None:
    if manager_id is not None and not db.query(User).filter(User.id == manager_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Manager non trouvé"
        )


@router.post("", response_model=TalentResponse, status_code=status.HTTP_201_CREATED)
async def create_talent(
    talent_data: TalentCreate,
    current_user: User = Depends(check_reviewer_role),
    db: Session = Depends(get_db)
):
    """
    Create a new talent with an optional rate card
    """
    _check_manager(db, talent_data.manager_id)

    talent = Talent(**talent_data.model_dump(exclude={"tarifs"}))
    talent.tarifs = TalentTarifs(**(talent_data.tarifs.model_dump() if talent_data.tarifs else {}))
    db.add(talent)
    db.commit()
    db.refresh(talent)

    logger.info(f"Talent {talent.id} created by user {current_user.id}")
    return talent


@router.get("", response_model=TalentListResponse)
async def get_talents(
    manager_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List talents, a TM only sees the talents they manage
    """
    query = db.query(Talent)

    if current_user.role == "TM":
        query = query.filter(Talent.manager_id == current_user.id)
    elif manager_id:
        query = query.filter(Talent.manager_id == manager_id)

    if search:
        pattern = f"%{search}%"
        query = query.filter((Talent.prenom.ilike(pattern)) | (Talent.nom.ilike(pattern)))

    total = query.count()
    talents = query.order_by(Talent.prenom, Talent.nom).offset(skip).limit(limit).all()
    return {"items": talents, "total": total}


@router.get("/{talent_id}", response_model=TalentResponse)
async def get_talent(
    talent_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a talent with its rate card
    """
    return get_talent_or_404(db, talent_id)


@router.put("/{talent_id}", response_model=TalentResponse)
async def update_talent(
    talent_id: int,
    talent_data: TalentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a talent (reviewers or the talent's manager)
    """
    talent = get_talent_or_404(db, talent_id)

    # Check permissions
    if not is_reviewer(current_user) and talent.manager_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Vous ne gérez pas ce talent"
        )

    update_data = talent_data.model_dump(exclude_unset=True)
    if "manager_id" in update_data:
        _check_manager(db, update_data["manager_id"])

    for key, value in update_data.items():
        setattr(talent, key, value)

    db.commit()
    db.refresh(talent)
    return talent


@router.delete("/{talent_id}")
async def delete_talent(
    talent_id: int,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Delete a talent (admin only), refused once deals exist
    """
    talent = get_talent_or_404(db, talent_id)

    if talent.collaborations or talent.negociations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Impossible de supprimer un talent lié à des négociations ou collaborations"
        )

    db.delete(talent)
    db.commit()
    return {"message": "Talent supprimé"}


@router.get("/{talent_id}/tarifs", response_model=Optional[TarifsResponse])
async def get_talent_tarifs(
    talent_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a talent's default rate card
    """
    return get_talent_or_404(db, talent_id).tarifs


@router.put("/{talent_id}/tarifs", response_model=TarifsResponse)
async def update_talent_tarifs(
    talent_id: int,
    tarifs_data: TarifsBase,
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Replace a talent's default rate card
    """
    talent = get_talent_or_404(db, talent_id)

    if talent.tarifs is None:
        talent.tarifs = TalentTarifs()

    for key, value in tarifs_data.model_dump().items():
        setattr(talent.tarifs, key, value)

    db.commit()
    db.refresh(talent.tarifs)
    logger.info(f"Rate card of talent {talent_id} updated by user {current_user.id}")
    return talent.tarifs


@router.get("/{talent_id}/tarif-suggere", response_model=TarifSuggereResponse)
async def get_suggested_tarif(
    talent_id: int,
    type: str = Query(..., min_length=1),
    partner_id: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Suggested unit price for a content type, partner rates first
    """
    return get_tarif_suggere(db, talent_id, type, partner_id)
