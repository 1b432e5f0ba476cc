from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    type: str
    titre: Optional[str] = None
    message: Optional[str] = None
    lien: Optional[str] = None
    lu: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NonLuesResponse(BaseModel):
    count: int
