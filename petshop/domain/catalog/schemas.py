"""Catalog domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    """Schema for creating a new service"""

    name: str = Field(min_length=3)
    duration: int = Field(gt=0, description="Duration in minutes")
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None


class ServiceUpdate(BaseModel):
    """Schema for updating an existing service"""

    name: Optional[str] = Field(default=None, min_length=3)
    duration: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None


class ServiceResponse(BaseModel):
    id: str
    name: str
    duration: int
    price: float
    description: Optional[str] = None
    created_at: Optional[datetime] = None
