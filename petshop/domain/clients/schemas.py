"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import PetSize
from ...shared.validators import validate_email, validate_phone


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str = Field(min_length=3)
    phone: str
    email: Optional[str] = None
    whatsapp: Optional[str] = None

    @field_validator("phone", "whatsapp")
    @classmethod
    def normalize_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return validate_email(v)


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    name: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None

    @field_validator("phone", "whatsapp")
    @classmethod
    def normalize_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return validate_email(v)


class ClientResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    petCount: int = 0
    created_at: Optional[datetime] = None


class PetCreate(BaseModel):
    """Schema for registering a pet"""

    name: str = Field(min_length=2)
    breed: Optional[str] = None
    size: PetSize
    notes: Optional[str] = None
    clientId: str = Field(min_length=1)


class PetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    breed: Optional[str] = None
    size: Optional[PetSize] = None
    notes: Optional[str] = None


class PetResponse(BaseModel):
    id: str
    name: str
    breed: Optional[str] = None
    size: PetSize
    notes: Optional[str] = None
    clientId: str
    clientName: Optional[str] = None
