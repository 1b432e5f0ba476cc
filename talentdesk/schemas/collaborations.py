from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class StatutCollaboration(str, Enum):
    NEGO = "NEGO"
    GAGNE = "GAGNE"
    PERDU = "PERDU"
    PUBLIE = "PUBLIE"
    FACTURE_RECUE = "FACTURE_RECUE"
    PAYE = "PAYE"


# Billing block as sent by clients, completeness is checked by the billing helpers
class BillingInput(BaseModel):
    raison_sociale: Optional[str] = None
    adresse_rue: Optional[str] = None
    code_postal: Optional[str] = None
    ville: Optional[str] = None
    pays: Optional[str] = None
    siret: Optional[str] = None
    numero_tva: Optional[str] = None


class CollabLivrableBase(BaseModel):
    type_contenu: Optional[str] = Field(None, max_length=50)
    quantite: int = Field(1, ge=1)
    prix_unitaire: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None


class CollabLivrableCreate(CollabLivrableBase):
    pass


class CollabLivrableResponse(CollabLivrableBase):
    id: int
    type_contenu: str
    prix_unitaire: Decimal

    class Config:
        from_attributes = True


class CollaborationCreate(BaseModel):
    talent_id: int
    marque_id: Optional[int] = None
    source: str = Field("INBOUND", pattern="^(INBOUND|OUTBOUND)$")
    description: Optional[str] = None
    commission_percent: Optional[Decimal] = None
    livrables: List[CollabLivrableCreate] = []
    billing: Optional[BillingInput] = None


class CollaborationUpdate(BaseModel):
    marque_id: Optional[int] = None
    source: Optional[str] = Field(None, pattern="^(INBOUND|OUTBOUND)$")
    description: Optional[str] = None
    montant_brut: Optional[Decimal] = Field(None, ge=0)
    commission_percent: Optional[Decimal] = None
    livrables: Optional[List[CollabLivrableCreate]] = None
    billing: Optional[BillingInput] = None


# Status / publication follow-up
class CollaborationPatch(BaseModel):
    statut: Optional[StatutCollaboration] = None
    raison_perdu: Optional[str] = None
    lien_publication: Optional[str] = None
    date_publication: Optional[datetime] = None


class CommissionRequest(BaseModel):
    montant_brut: Optional[Decimal] = Field(None, ge=0)
    livrables: Optional[List[CollabLivrableCreate]] = None
    commission_percent: Optional[Decimal] = None
    talent_id: Optional[int] = None
    source: str = Field("INBOUND", pattern="^(INBOUND|OUTBOUND)$")


class CommissionResponse(BaseModel):
    montant_brut: Decimal
    commission_percent: Decimal
    commission_euros: Decimal
    montant_net: Decimal


class DocumentSummary(BaseModel):
    id: int
    reference: str
    type: str
    statut: str
    montant_ttc: Optional[Decimal] = None

    class Config:
        from_attributes = True


class CollaborationResponse(BaseModel):
    id: int
    reference: str
    talent_id: int
    marque_id: Optional[int] = None
    source: str
    description: Optional[str] = None
    montant_brut: Decimal
    commission_percent: Decimal
    commission_euros: Decimal
    montant_net: Decimal
    statut: str
    raison_perdu: Optional[str] = None
    lien_publication: Optional[str] = None
    date_publication: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    billing_raison_sociale: str
    billing_adresse_rue: str
    billing_code_postal: str
    billing_ville: str
    billing_pays: str
    billing_siret: Optional[str] = None
    billing_numero_tva: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    livrables: List[CollabLivrableResponse] = []

    class Config:
        from_attributes = True


class CollaborationDetailResponse(CollaborationResponse):
    documents: List[DocumentSummary] = []
