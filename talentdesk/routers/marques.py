import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from talentdesk.database import get_db
from talentdesk.models.users import User
from talentdesk.models.marques import Marque, MarqueContact
from talentdesk.schemas.marques import (
    MarqueCreate, MarqueUpdate, MarqueResponse,
    MarqueContactCreate, MarqueContactResponse
)
from talentdesk.dependencies import get_current_active_user, check_admin_role

logger = logging.getLogger(__name__)

router = APIRouter()


def get_marque_or_404(db: Session, marque_id: int) -> Marque:
    marque = db.query(Marque).filter(Marque.id == marque_id).first()
    if not marque:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Marque non trouvée"
        )
    return marque


def _clear_principal(marque: Marque, keep: Optional[MarqueContact] = None) -> None:
    """Only one principal contact per brand"""
    for contact in marque.contacts:
        if contact is not keep:
            contact.principal = False


@router.post("", response_model=MarqueResponse, status_code=status.HTTP_201_CREATED)
async def create_marque(
    marque_data: MarqueCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a new brand with its billing profile and contacts
    """
    marque = Marque(**marque_data.model_dump(exclude={"contacts"}))

    principal_seen = False
    for contact_data in marque_data.contacts:
        contact = MarqueContact(**contact_data.model_dump())
        if contact.principal:
            contact.principal = not principal_seen
            principal_seen = True
        marque.contacts.append(contact)

    db.add(marque)
    db.commit()
    db.refresh(marque)

    logger.info(f"Brand {marque.nom} created by user {current_user.id}")
    return marque


@router.get("", response_model=List[MarqueResponse])
async def get_marques(
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List brands
    """
    query = db.query(Marque)
    if search:
        query = query.filter(Marque.nom.ilike(f"%{search}%"))
    return query.order_by(Marque.nom).offset(skip).limit(limit).all()


@router.get("/{marque_id}", response_model=MarqueResponse)
async def get_marque(
    marque_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get a brand with its contacts
    """
    return get_marque_or_404(db, marque_id)


@router.put("/{marque_id}", response_model=MarqueResponse)
async def update_marque(
    marque_id: int,
    marque_data: MarqueUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a brand, existing collaboration snapshots are not affected
    """
    marque = get_marque_or_404(db, marque_id)

    for key, value in marque_data.model_dump(exclude_unset=True).items():
        setattr(marque, key, value)

    db.commit()
    db.refresh(marque)
    return marque


@router.delete("/{marque_id}")
async def delete_marque(
    marque_id: int,
    current_user: User = Depends(check_admin_role),
    db: Session = Depends(get_db)
):
    """
    Delete a brand (admin only), refused once collaborations exist
    """
    marque = get_marque_or_404(db, marque_id)

    if marque.collaborations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Impossible de supprimer une marque liée à des collaborations"
        )

    db.delete(marque)
    db.commit()
    return {"message": "Marque supprimée"}


@router.post("/{marque_id}/contacts", response_model=MarqueContactResponse, status_code=status.HTTP_201_CREATED)
async def add_contact(
    marque_id: int,
    contact_data: MarqueContactCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Add a contact to a brand
    """
    marque = get_marque_or_404(db, marque_id)

    contact = MarqueContact(**contact_data.model_dump())
    if contact.principal:
        _clear_principal(marque)
    marque.contacts.append(contact)

    db.commit()
    db.refresh(contact)
    return contact


@router.put("/{marque_id}/contacts/{contact_id}", response_model=MarqueContactResponse)
async def update_contact(
    marque_id: int,
    contact_id: int,
    contact_data: MarqueContactCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a brand contact
    """
    marque = get_marque_or_404(db, marque_id)
    contact = next((c for c in marque.contacts if c.id == contact_id), None)
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact non trouvé"
        )

    for key, value in contact_data.model_dump().items():
        setattr(contact, key, value)
    if contact.principal:
        _clear_principal(marque, keep=contact)

    db.commit()
    db.refresh(contact)
    return contact


@router.delete("/{marque_id}/contacts/{contact_id}")
async def delete_contact(
    marque_id: int,
    contact_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Remove a brand contact
    """
    marque = get_marque_or_404(db, marque_id)
    contact = next((c for c in marque.contacts if c.id == contact_id), None)
    if not contact:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Contact non trouvé"
        )

    marque.contacts.remove(contact)
    db.commit()
    return {"message": "Contact supprimé"}
