"""Subscription service - Business logic for plans, subscriptions and renewal"""

import calendar
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Subscription, SubscriptionCredit, SubscriptionPlan, SubscriptionState
from ...shared.errors import (
    ClientNotFoundError,
    ConflictError,
    DuplicateError,
    PetShopError,
    PlanNotFoundError,
    ServiceNotFoundError,
    SubscriptionExistsError,
    SubscriptionNotFoundError,
)
from .repository import SubscriptionRepository
from .schemas import PlanCreate, PlanUpdate

logger = logging.getLogger(__name__)


def add_months(day: date, months: int) -> date:
    """Same day N months later, clamped to the last day of shorter months"""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def next_renewal_after(renewal_date: date, today: date) -> date:
    """First monthly anniversary of renewal_date that falls after today"""
    months = 1
    while add_months(renewal_date, months) <= today:
        months += 1
    return add_months(renewal_date, months)


class SubscriptionService:
    """Service for subscription plans and client subscriptions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SubscriptionRepository()

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def get_plans(self) -> list[SubscriptionPlan]:
        return self.repo.get_plans(self.db)

    def get_plan(self, plan_id: str) -> SubscriptionPlan:
        plan = self.repo.get_plan_by_id(self.db, plan_id)
        if not plan:
            raise PlanNotFoundError(plan_id)
        return plan

    def _check_plan_services(self, credits: list) -> None:
        service_ids = [c.serviceId for c in credits]
        found = self.repo.get_services(self.db, service_ids)
        missing = [service_id for service_id in service_ids if service_id not in found]
        if missing:
            raise ServiceNotFoundError(missing)

    def create_plan(self, data: PlanCreate) -> SubscriptionPlan:
        if self.repo.get_plan_by_name(self.db, data.name):
            raise DuplicateError(f"A plan named '{data.name}' already exists", field="name")
        self._check_plan_services(data.credits)

        plan = SubscriptionPlan(
            name=data.name,
            price=data.price,
            description=data.description,
            credits=[c.model_dump() for c in data.credits],
        )
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        logger.info(f"✅ Subscription plan created: {plan.name} ({len(plan.credits)} service credit(s))")
        return plan

    def update_plan(self, plan_id: str, data: PlanUpdate) -> SubscriptionPlan:
        plan = self.get_plan(plan_id)
        if data.name is not None and data.name != plan.name:
            if self.repo.get_plan_by_name(self.db, data.name):
                raise DuplicateError(f"A plan named '{data.name}' already exists", field="name")
            plan.name = data.name
        if data.price is not None:
            plan.price = data.price
        if data.description is not None:
            plan.description = data.description
        if data.credits is not None:
            self._check_plan_services(data.credits)
            plan.credits = [c.model_dump() for c in data.credits]
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def delete_plan(self, plan_id: str) -> dict:
        plan = self.get_plan(plan_id)
        if self.repo.plan_has_subscriptions(self.db, plan_id):
            raise ConflictError("Plan has subscriptions and cannot be deleted")
        self.db.delete(plan)
        self.db.commit()
        logger.info(f"🗑️ Subscription plan deleted: {plan_id}")
        return {"message": "Subscription plan deleted"}

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _issue_credits(self, client_id: str, plan: SubscriptionPlan, renewal_date: date) -> list[SubscriptionCredit]:
        """Create a full set of credits for one renewal period"""
        entries = plan.credits or []
        services = self.repo.get_services(self.db, [entry["serviceId"] for entry in entries])
        credits = []
        for entry in entries:
            service = services.get(entry["serviceId"])
            if not service:
                raise ServiceNotFoundError([entry["serviceId"]])
            credit = SubscriptionCredit(
                client_id=client_id,
                plan_id=plan.id,
                service_id=service.id,
                service_name=service.name,
                total_credits=entry["quantity"],
                used_credits=0,
                remaining_credits=entry["quantity"],
                renewal_date=renewal_date,
            )
            self.db.add(credit)
            credits.append(credit)
        return credits

    def subscribe(self, client_id: str, plan_id: str, today: Optional[date] = None) -> Subscription:
        """Enroll a client in a plan and grant the first period's credits, atomically"""
        today = today or date.today()
        try:
            client = self.repo.get_client(self.db, client_id)
            if not client:
                raise ClientNotFoundError(client_id)
            plan = self.get_plan(plan_id)

            if self.repo.get_active_subscription(self.db, client_id):
                raise SubscriptionExistsError("This client already has an active subscription")

            renewal_date = add_months(today, 1)
            subscription = Subscription(
                client_id=client_id,
                plan_id=plan.id,
                plan_name=plan.name,
                status=SubscriptionState.ACTIVE.value,
                start_date=today,
                renewal_date=renewal_date,
            )
            self.db.add(subscription)
            self._issue_credits(client_id, plan, renewal_date)
            self.db.commit()
        except PetShopError:
            self.db.rollback()
            raise

        self.db.refresh(subscription)
        logger.info(f"✅ Client {client_id} subscribed to plan {plan.name} until {renewal_date}")
        return subscription

    def get_active_subscription(self, client_id: str) -> tuple[Subscription, list[SubscriptionCredit]]:
        subscription = self.repo.get_active_subscription(self.db, client_id)
        if not subscription:
            raise SubscriptionNotFoundError("No active subscription found")
        return subscription, self.repo.get_period_credits(self.db, subscription)

    def renew_due_subscriptions(self, today: Optional[date] = None) -> dict:
        """
        Renew every active subscription whose renewal date has arrived.

        Each subscription is renewed in its own transaction: the renewal date
        moves forward by whole months until it is past today and the client's
        credits for the plan are replaced by a fresh full set. Missed periods
        are not issued retroactively. A failing subscription is rolled back and
        reported without blocking the others.
        """
        today = today or date.today()
        due_ids = [s.id for s in self.repo.get_due_subscriptions(self.db, today)]
        if not due_ids:
            logger.info("ℹ️ No subscriptions due for renewal")
            return {"renewed": 0, "failed": []}

        renewed = 0
        failed = []
        for subscription_id in due_ids:
            try:
                subscription = self.repo.lock_subscription(self.db, subscription_id)
                if not subscription or subscription.renewal_date > today:
                    self.db.rollback()
                    continue
                plan = self.get_plan(subscription.plan_id)
                next_renewal = next_renewal_after(subscription.renewal_date, today)
                subscription.renewal_date = next_renewal
                self.repo.delete_credits(self.db, subscription.client_id, subscription.plan_id)
                self._issue_credits(subscription.client_id, plan, next_renewal)
                self.db.commit()
                renewed += 1
                logger.info(f"🔄 Subscription {subscription_id} renewed until {next_renewal}")
            except PetShopError as e:
                self.db.rollback()
                failed.append(subscription_id)
                logger.error(f"❌ Failed to renew subscription {subscription_id}: {e.message}")

        return {"renewed": renewed, "failed": failed}
