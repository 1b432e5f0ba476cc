from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum

from talentdesk.schemas.collaborations import BillingInput


class Source(str, Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


# Negotiated deliverable, prices are filled in as the deal progresses
class NegoLivrableBase(BaseModel):
    type_contenu: str = Field(..., min_length=1, max_length=50)
    quantite: int = Field(1, ge=1)
    prix_demande: Optional[Decimal] = Field(None, ge=0)
    prix_souhaite: Optional[Decimal] = Field(None, ge=0)
    prix_final: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None


class NegoLivrableCreate(NegoLivrableBase):
    pass


class NegoLivrableResponse(NegoLivrableBase):
    id: int

    class Config:
        from_attributes = True


class NegociationBase(BaseModel):
    talent_id: int
    marque_id: Optional[int] = None
    nom_marque_saisi: Optional[str] = Field(None, max_length=255)
    contact_marque: Optional[str] = None
    email_contact: Optional[str] = None
    source: Source = Source.INBOUND
    brief: Optional[str] = None
    budget_marque: Optional[Decimal] = Field(None, ge=0)
    budget_souhaite: Optional[Decimal] = Field(None, ge=0)
    budget_final: Optional[Decimal] = Field(None, ge=0)
    date_deadline: Optional[datetime] = None


class NegociationCreate(NegociationBase):
    livrables: List[NegoLivrableCreate] = []


# Full update, livrables replace the existing list when provided
class NegociationUpdate(BaseModel):
    marque_id: Optional[int] = None
    nom_marque_saisi: Optional[str] = Field(None, max_length=255)
    contact_marque: Optional[str] = None
    email_contact: Optional[str] = None
    source: Optional[Source] = None
    brief: Optional[str] = None
    budget_marque: Optional[Decimal] = Field(None, ge=0)
    budget_souhaite: Optional[Decimal] = Field(None, ge=0)
    budget_final: Optional[Decimal] = Field(None, ge=0)
    date_deadline: Optional[datetime] = None
    livrables: Optional[List[NegoLivrableCreate]] = None


# Reviewer decision
class ValidationRequest(BaseModel):
    action: str
    raison_refus: Optional[str] = None
    billing: Optional[BillingInput] = None
    commission_percent: Optional[Decimal] = None


class CommentaireCreate(BaseModel):
    contenu: str


class CommentaireResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    contenu: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NegociationResponse(NegociationBase):
    id: int
    reference: str
    tm_id: Optional[int] = None
    statut: str
    raison_refus: Optional[str] = None
    valide_par: Optional[int] = None
    date_validation: Optional[datetime] = None
    date_submitted: Optional[datetime] = None
    modified_since_review: bool = False
    reviewed_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None
    collaboration_id: Optional[int] = None
    created_at: Optional[datetime] = None
    livrables: List[NegoLivrableResponse] = []

    class Config:
        from_attributes = True


class NegociationDetailResponse(NegociationResponse):
    commentaires: List[CommentaireResponse] = []
