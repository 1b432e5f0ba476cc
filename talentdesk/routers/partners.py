import logging
import re
import unicodedata
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.partners import Partner, PartnerTarifOverride
from talentdesk.schemas.partners import (
    PartnerCreate, PartnerUpdate, PartnerResponse,
    PartnerTarifsUpdate, PartnerTarifOverrideResponse
)
from talentdesk.dependencies import get_current_active_user, check_tarif_manager_role
from talentdesk.routers.talents import get_talent_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


def slugify(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    ascii_value = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"[^a-z0-9]+", "-", ascii_value).strip("-")


def get_partner_or_404(db: Session, partner_id: int) -> Partner:
    partner = db.query(Partner).filter(Partner.id == partner_id).first()
    if not partner:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Partenaire introuvable"
        )
    return partner


def _check_slug_available(db: Session, slug: str, partner_id: Optional[int] = None) -> None:
    query = db.query(Partner).filter(Partner.slug == slug)
    if partner_id is not None:
        query = query.filter(Partner.id != partner_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce slug est déjà utilisé"
        )


@router.post("", response_model=PartnerResponse, status_code=status.HTTP_201_CREATED)
async def create_partner(
    partner_data: PartnerCreate,
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Create a new partner
    """
    slug = slugify(partner_data.slug or partner_data.nom)
    _check_slug_available(db, slug)

    partner = Partner(nom=partner_data.nom, slug=slug, description=partner_data.description)
    db.add(partner)
    db.commit()
    db.refresh(partner)
    return partner


@router.get("", response_model=List[PartnerResponse])
async def get_partners(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List partners
    """
    return db.query(Partner).order_by(Partner.nom).all()


@router.get("/{partner_id}", response_model=PartnerResponse)
async def get_partner(
    partner_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a partner
    """
    return get_partner_or_404(db, partner_id)


@router.put("/{partner_id}", response_model=PartnerResponse)
async def update_partner(
    partner_id: int,
    partner_data: PartnerUpdate,
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Update a partner
    """
    partner = get_partner_or_404(db, partner_id)

    update_data = partner_data.model_dump(exclude_unset=True)
    if update_data.get("slug"):
        update_data["slug"] = slugify(update_data["slug"])
        _check_slug_available(db, update_data["slug"], partner_id)

    for key, value in update_data.items():
        if value is not None:
            setattr(partner, key, value)

    db.commit()
    db.refresh(partner)
    return partner


@router.delete("/{partner_id}")
async def delete_partner(
    partner_id: int,
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Delete a partner and its negotiated rates
    """
    partner = get_partner_or_404(db, partner_id)
    db.delete(partner)
    db.commit()
    return {"message": "Partenaire supprimé"}


@router.get("/{partner_id}/tarifs", response_model=List[PartnerTarifOverrideResponse])
async def get_partner_tarifs(
    partner_id: int,
    talent_id: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Negotiated rates of a partner, optionally for one talent
    """
    get_partner_or_404(db, partner_id)

    query = db.query(PartnerTarifOverride).filter(PartnerTarifOverride.partner_id == partner_id)
    if talent_id is not None:
        query = query.filter(PartnerTarifOverride.talent_id == talent_id)
    return query.order_by(PartnerTarifOverride.talent_id).all()


@router.put("/{partner_id}/tarifs", response_model=PartnerTarifOverrideResponse)
async def upsert_partner_tarifs(
    partner_id: int,
    tarifs_data: PartnerTarifsUpdate,
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Create or update the negotiated rates of a talent for a partner

    Only the provided rates are touched; empty or zero values are stored
    as null so the talent's default applies.
    """
    get_partner_or_404(db, partner_id)
    get_talent_or_404(db, tarifs_data.talent_id)

    override = db.query(PartnerTarifOverride).filter(
        PartnerTarifOverride.partner_id == partner_id,
        PartnerTarifOverride.talent_id == tarifs_data.talent_id
    ).first()

    if not override:
        override = PartnerTarifOverride(partner_id=partner_id, talent_id=tarifs_data.talent_id)
        db.add(override)

    for key, value in tarifs_data.overrides.model_dump(exclude_unset=True).items():
        setattr(override, key, value or None)

    if "note" in tarifs_data.model_fields_set:
        override.note = tarifs_data.note or None

    db.commit()
    db.refresh(override)

    logger.info(f"Partner {partner_id} rates saved for talent {tarifs_data.talent_id}")
    return override


@router.delete("/{partner_id}/tarifs")
async def reset_partner_tarifs(
    partner_id: int,
    talent_id: int = Query(...),
    current_user: User = Depends(check_tarif_manager_role),
    db: Session = Depends(get_db)
):
    """
    Reset a talent to its default rates for this partner
    """
    get_partner_or_404(db, partner_id)

    deleted = db.query(PartnerTarifOverride).filter(
        PartnerTarifOverride.partner_id == partner_id,
        PartnerTarifOverride.talent_id == talent_id
    ).delete()
    db.commit()

    return {"message": "Tarifs réinitialisés", "deleted": deleted}
