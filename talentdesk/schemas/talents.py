from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


# Rate card, one optional unit price per content type
class TarifsBase(BaseModel):
    tarif_story: Optional[Decimal] = Field(None, ge=0)
    tarif_story_concours: Optional[Decimal] = Field(None, ge=0)
    tarif_post: Optional[Decimal] = Field(None, ge=0)
    tarif_post_concours: Optional[Decimal] = Field(None, ge=0)
    tarif_post_commun: Optional[Decimal] = Field(None, ge=0)
    tarif_reel: Optional[Decimal] = Field(None, ge=0)
    tarif_tiktok_video: Optional[Decimal] = Field(None, ge=0)
    tarif_youtube_video: Optional[Decimal] = Field(None, ge=0)
    tarif_youtube_short: Optional[Decimal] = Field(None, ge=0)
    tarif_event: Optional[Decimal] = Field(None, ge=0)
    tarif_shooting: Optional[Decimal] = Field(None, ge=0)
    tarif_ambassadeur: Optional[Decimal] = Field(None, ge=0)


class TarifsResponse(TarifsBase):
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Base Talent schema with common attributes
class TalentBase(BaseModel):
    prenom: str = Field(..., min_length=1, max_length=100)
    nom: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    manager_id: Optional[int] = None
    commission_inbound: Decimal = Field(Decimal('20'), ge=0, le=100)
    commission_outbound: Decimal = Field(Decimal('30'), ge=0, le=100)


# Schema for creating a new talent
class TalentCreate(TalentBase):
    tarifs: Optional[TarifsBase] = None


# Schema for updating a talent
class TalentUpdate(BaseModel):
    prenom: Optional[str] = Field(None, min_length=1, max_length=100)
    nom: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    manager_id: Optional[int] = None
    commission_inbound: Optional[Decimal] = Field(None, ge=0, le=100)
    commission_outbound: Optional[Decimal] = Field(None, ge=0, le=100)


# Schema for returning a talent
class TalentResponse(TalentBase):
    id: int
    created_at: Optional[datetime] = None
    tarifs: Optional[TarifsResponse] = None

    class Config:
        from_attributes = True


class TalentListResponse(BaseModel):
    items: List[TalentResponse]
    total: int


# Suggested unit price for a content type
class TarifSuggereResponse(BaseModel):
    type_contenu: Optional[str] = None
    prix_unitaire: Optional[Decimal] = None
    source: Optional[str] = None
