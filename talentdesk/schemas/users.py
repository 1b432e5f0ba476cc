from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    HEAD_OF = "HEAD_OF"
    HEAD_OF_INFLUENCE = "HEAD_OF_INFLUENCE"
    HEAD_OF_SALES = "HEAD_OF_SALES"
    TM = "TM"
    CM = "CM"
    TALENT = "TALENT"


# Base User schema with common attributes
class UserBase(BaseModel):
    prenom: str = Field(..., min_length=1, max_length=100)
    nom: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: Role = Role.TM


# Schema for creating a new user
class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


# Schema for updating user information
class UserUpdate(BaseModel):
    prenom: Optional[str] = Field(None, min_length=1, max_length=100)
    nom: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None
    actif: Optional[bool] = None


# Schema for returning user information
class UserResponse(UserBase):
    id: int
    actif: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True
