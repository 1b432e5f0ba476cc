from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TypeDocument(str, Enum):
    DEVIS = "DEVIS"
    FACTURE = "FACTURE"
    AVOIR = "AVOIR"


# Schema for invoice/quote line items
class LigneBase(BaseModel):
    description: str = Field(..., min_length=1)
    quantite: Decimal = Field(Decimal('1'), gt=0)
    prix_unitaire_ht: Decimal = Field(Decimal('0'), ge=0)


class LigneCreate(LigneBase):
    pass


# Credit note lines carry negative quantities
class LigneResponse(BaseModel):
    id: int
    description: str
    quantite: Decimal
    prix_unitaire_ht: Decimal
    ordre: int
    taux_tva: Decimal

    class Config:
        from_attributes = True


# Schema for generating a quote or an invoice from a collaboration
class DocumentCreate(BaseModel):
    type: TypeDocument
    collaboration_id: int
    lignes: List[LigneCreate] = []
    titre: Optional[str] = Field(None, max_length=255)
    po_client: Optional[str] = Field(None, max_length=100)
    commentaires: Optional[str] = None
    date_document: Optional[datetime] = None
    delai_paiement_jours: Optional[int] = Field(None, ge=0)


# Draft edition, lines are replaced as a whole
class DocumentUpdate(BaseModel):
    lignes: Optional[List[LigneCreate]] = None
    titre: Optional[str] = Field(None, max_length=255)
    po_client: Optional[str] = Field(None, max_length=100)
    commentaires: Optional[str] = None
    date_echeance: Optional[datetime] = None
    mode_paiement: Optional[str] = Field(None, max_length=50)


class PaiementRequest(BaseModel):
    date_paiement: Optional[datetime] = None
    mode_paiement: Optional[str] = None
    reference_paiement: Optional[str] = None


class AnnulationRequest(BaseModel):
    motif: Optional[str] = None


class RefusRequest(BaseModel):
    raison: Optional[str] = None


class AvoirRequest(BaseModel):
    motif: Optional[str] = None


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    id: int
    type: str
    description: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentResponse(BaseModel):
    id: int
    reference: str
    type: str
    statut: str
    collaboration_id: int
    titre: Optional[str] = None
    montant_ht: Decimal
    taux_tva: Decimal
    montant_tva: Decimal
    montant_ttc: Decimal
    type_tva: Optional[str] = None
    mention_tva: Optional[str] = None
    date_document: Optional[datetime] = None
    date_emission: Optional[datetime] = None
    date_echeance: Optional[datetime] = None
    date_validation: Optional[datetime] = None
    po_client: Optional[str] = None
    facture_ref: Optional[str] = None
    avoir_ref: Optional[str] = None
    mode_paiement: Optional[str] = None
    date_paiement: Optional[datetime] = None
    reference_paiement: Optional[str] = None
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentDetailResponse(DocumentResponse):
    lignes: List[LigneResponse] = []
    events: List[EventResponse] = []
    comments: List[CommentResponse] = []
