from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class MarqueContactBase(BaseModel):
    prenom: Optional[str] = Field(None, max_length=100)
    nom: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    telephone: Optional[str] = None
    poste: Optional[str] = None
    principal: bool = False


class MarqueContactCreate(MarqueContactBase):
    pass


class MarqueContactResponse(MarqueContactBase):
    id: int
    marque_id: int

    class Config:
        from_attributes = True


# Base Marque schema with billing profile and payment terms
class MarqueBase(BaseModel):
    nom: str = Field(..., min_length=1, max_length=255)
    secteur: Optional[str] = None
    site_web: Optional[str] = None
    raison_sociale: Optional[str] = None
    adresse_rue: Optional[str] = None
    adresse_complement: Optional[str] = None
    code_postal: Optional[str] = Field(None, max_length=20)
    ville: Optional[str] = None
    pays: Optional[str] = "France"
    siret: Optional[str] = Field(None, max_length=14)
    numero_tva: Optional[str] = Field(None, max_length=20)
    delai_paiement: int = Field(30, ge=0)
    mode_paiement: str = "Virement bancaire"
    devise: str = Field("EUR", min_length=3, max_length=3)
    notes: Optional[str] = None


class MarqueCreate(MarqueBase):
    contacts: List[MarqueContactCreate] = []


class MarqueUpdate(BaseModel):
    nom: Optional[str] = Field(None, min_length=1, max_length=255)
    secteur: Optional[str] = None
    site_web: Optional[str] = None
    raison_sociale: Optional[str] = None
    adresse_rue: Optional[str] = None
    adresse_complement: Optional[str] = None
    code_postal: Optional[str] = Field(None, max_length=20)
    ville: Optional[str] = None
    pays: Optional[str] = None
    siret: Optional[str] = Field(None, max_length=14)
    numero_tva: Optional[str] = Field(None, max_length=20)
    delai_paiement: Optional[int] = Field(None, ge=0)
    mode_paiement: Optional[str] = None
    devise: Optional[str] = Field(None, min_length=3, max_length=3)
    notes: Optional[str] = None


class MarqueResponse(MarqueBase):
    id: int
    created_at: Optional[datetime] = None
    contacts: List[MarqueContactResponse] = []

    class Config:
        from_attributes = True
