from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from talentdesk.schemas.talents import TarifsBase


class PartnerBase(BaseModel):
    nom: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class PartnerCreate(PartnerBase):
    pass


class PartnerUpdate(BaseModel):
    nom: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class PartnerResponse(PartnerBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Sparse override of a talent's rate card for one partner
class PartnerTarifsUpdate(BaseModel):
    talent_id: int
    overrides: TarifsBase = TarifsBase()
    note: Optional[str] = None


class PartnerTarifOverrideResponse(TarifsBase):
    id: int
    partner_id: int
    talent_id: int
    note: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
