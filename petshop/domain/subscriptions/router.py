"""Subscription router - FastAPI endpoints for plans and subscriptions"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ... import config
from ...auth import (
    ROLE_CLIENT,
    CurrentUser,
    get_current_admin,
    get_current_staff,
    get_current_user,
    security,
)
from ...database import get_db
from ...models import Subscription, SubscriptionCredit, SubscriptionPlan
from .schemas import (
    CreditResponse,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    RenewalResponse,
    SubscribeRequest,
    SubscriptionResponse,
)
from .service import SubscriptionService

logger = logging.getLogger(__name__)

plans_router = APIRouter(prefix="/subscription-plans", tags=["Subscription Plans"])
router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


async def verify_renewal_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Allow the scheduler (CRON_SECRET bearer) or an admin to trigger renewal"""
    token = credentials.credentials if credentials else None
    if config.CRON_SECRET and token and hmac.compare_digest(token, config.CRON_SECRET):
        return "cron"
    user = await get_current_user(credentials)
    await get_current_admin(user)
    return f"admin:{user.id}"


def to_plan_response(plan: SubscriptionPlan) -> PlanResponse:
    return PlanResponse(
        id=plan.id,
        name=plan.name,
        price=float(plan.price),
        description=plan.description,
        credits=plan.credits or [],
        created_at=plan.created_at,
    )


def to_subscription_response(
    subscription: Subscription, credits: Optional[list[SubscriptionCredit]] = None
) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=subscription.id,
        clientId=subscription.client_id,
        planId=subscription.plan_id,
        planName=subscription.plan_name,
        status=subscription.status,
        startDate=subscription.start_date,
        renewalDate=subscription.renewal_date,
        credits=[
            CreditResponse(
                id=c.id,
                serviceId=c.service_id,
                serviceName=c.service_name,
                totalCredits=c.total_credits,
                usedCredits=c.used_credits,
                remainingCredits=c.remaining_credits,
                renewalDate=c.renewal_date,
            )
            for c in credits or []
        ],
    )


# ============================================================================
# PLANS
# ============================================================================


@plans_router.get("", response_model=list[PlanResponse])
async def get_plans(
    current_user: CurrentUser = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return [to_plan_response(p) for p in service.get_plans()]


@plans_router.post("", response_model=PlanResponse, status_code=201)
async def create_plan(
    data: PlanCreate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return to_plan_response(service.create_plan(data))


@plans_router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return to_plan_response(service.get_plan(plan_id))


@plans_router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return to_plan_response(service.update_plan(plan_id, data))


@plans_router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.delete_plan(plan_id)


# ============================================================================
# SUBSCRIPTIONS
# ============================================================================


@router.post("", response_model=SubscriptionResponse, status_code=201)
async def subscribe_client(
    data: SubscribeRequest,
    current_user: CurrentUser = Depends(get_current_staff),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Enroll a client in a plan"""
    subscription = service.subscribe(data.clientId, data.planId)
    _, credits = service.get_active_subscription(subscription.client_id)
    return to_subscription_response(subscription, credits)


@router.get("/me", response_model=SubscriptionResponse)
async def get_my_subscription(
    current_user: CurrentUser = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Active subscription and current-period credits of the signed-in client"""
    if current_user.role != ROLE_CLIENT:
        raise HTTPException(status_code=403, detail="Only clients have subscriptions")
    subscription, credits = service.get_active_subscription(current_user.id)
    return to_subscription_response(subscription, credits)


@router.get("/client/{client_id}", response_model=SubscriptionResponse)
async def get_client_subscription(
    client_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: SubscriptionService = Depends(get_subscription_service),
):
    subscription, credits = service.get_active_subscription(client_id)
    return to_subscription_response(subscription, credits)


@router.post("/renew", response_model=RenewalResponse)
async def renew_subscriptions(
    caller: str = Depends(verify_renewal_caller),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Renew subscriptions whose renewal date has arrived (called daily by a scheduler)"""
    logger.info(f"🔄 Subscription renewal triggered by {caller}")
    result = service.renew_due_subscriptions()
    if result["renewed"] == 0 and not result["failed"]:
        message = "No subscriptions to renew today."
    else:
        message = f"Renewal finished. {result['renewed']} subscription(s) renewed."
    return RenewalResponse(
        message=message,
        renewedCount=result["renewed"],
        failedSubscriptionIds=result["failed"],
    )
