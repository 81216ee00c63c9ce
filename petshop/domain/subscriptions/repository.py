"""Subscription repository - Database operations for plans, subscriptions and credits"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    Client,
    Service,
    Subscription,
    SubscriptionCredit,
    SubscriptionPlan,
    SubscriptionState,
)

ACTIVE = SubscriptionState.ACTIVE.value


class SubscriptionRepository:
    """Repository for subscription database operations. Callers own the transaction."""

    # Plan Methods
    @staticmethod
    def get_plans(db: Session) -> list[SubscriptionPlan]:
        return db.query(SubscriptionPlan).order_by(SubscriptionPlan.name.asc()).all()

    @staticmethod
    def get_plan_by_id(db: Session, plan_id: str) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()

    @staticmethod
    def get_plan_by_name(db: Session, name: str) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.name == name).first()

    @staticmethod
    def plan_has_subscriptions(db: Session, plan_id: str) -> bool:
        return db.query(Subscription.id).filter(Subscription.plan_id == plan_id).first() is not None

    # Subscription Methods
    @staticmethod
    def get_client(db: Session, client_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_services(db: Session, service_ids: list[str]) -> dict[str, Service]:
        services = db.query(Service).filter(Service.id.in_(service_ids)).all() if service_ids else []
        return {s.id: s for s in services}

    @staticmethod
    def get_active_subscription(db: Session, client_id: str) -> Optional[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.client_id == client_id, Subscription.status == ACTIVE)
            .first()
        )

    @staticmethod
    def get_due_subscriptions(db: Session, today: date) -> list[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.status == ACTIVE, Subscription.renewal_date <= today)
            .order_by(Subscription.renewal_date)
            .all()
        )

    @staticmethod
    def lock_subscription(db: Session, subscription_id: str) -> Optional[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.id == subscription_id, Subscription.status == ACTIVE)
            .with_for_update()
            .first()
        )

    # Credit Methods
    @staticmethod
    def get_period_credits(db: Session, subscription: Subscription) -> list[SubscriptionCredit]:
        return (
            db.query(SubscriptionCredit)
            .filter(
                SubscriptionCredit.client_id == subscription.client_id,
                SubscriptionCredit.plan_id == subscription.plan_id,
                SubscriptionCredit.renewal_date == subscription.renewal_date,
            )
            .order_by(SubscriptionCredit.service_name.asc())
            .all()
        )

    @staticmethod
    def delete_credits(db: Session, client_id: str, plan_id: str) -> int:
        return (
            db.query(SubscriptionCredit)
            .filter(SubscriptionCredit.client_id == client_id, SubscriptionCredit.plan_id == plan_id)
            .delete(synchronize_session=False)
        )
