"""Subscription domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PlanCredit(BaseModel):
    """Number of credits a plan grants per renewal period for one service"""

    serviceId: str = Field(min_length=1)
    quantity: int = Field(gt=0)


def _unique_services(v: list[PlanCredit]) -> list[PlanCredit]:
    seen = set()
    for credit in v:
        if credit.serviceId in seen:
            raise ValueError(f"Service {credit.serviceId} is listed more than once")
        seen.add(credit.serviceId)
    return v


class PlanCreate(BaseModel):
    """Schema for creating a subscription plan"""

    name: str = Field(min_length=3)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    credits: list[PlanCredit] = Field(min_length=1)

    @field_validator("credits")
    @classmethod
    def validate_credits(cls, v: list[PlanCredit]) -> list[PlanCredit]:
        return _unique_services(v)


class PlanUpdate(BaseModel):
    """Schema for updating a plan. New credits apply from the next renewal."""

    name: Optional[str] = Field(default=None, min_length=3)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    credits: Optional[list[PlanCredit]] = Field(default=None, min_length=1)

    @field_validator("credits")
    @classmethod
    def validate_credits(cls, v: Optional[list[PlanCredit]]) -> Optional[list[PlanCredit]]:
        if v is None:
            return v
        return _unique_services(v)


class PlanResponse(BaseModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None
    credits: list[PlanCredit]
    created_at: Optional[datetime] = None


class SubscribeRequest(BaseModel):
    clientId: str = Field(min_length=1)
    planId: str = Field(min_length=1)


class CreditResponse(BaseModel):
    id: str
    serviceId: str
    serviceName: str
    totalCredits: int
    usedCredits: int
    remainingCredits: int
    renewalDate: date


class SubscriptionResponse(BaseModel):
    id: str
    clientId: str
    planId: str
    planName: str
    status: str
    startDate: date
    renewalDate: date
    credits: list[CreditResponse] = []


class RenewalResponse(BaseModel):
    message: str
    renewedCount: int
    failedSubscriptionIds: list[str] = []
