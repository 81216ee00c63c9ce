"""Credit ledger - consumes subscription credits inside the caller's transaction"""

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...models import Service, SubscriptionCredit
from ...shared.errors import InsufficientCreditsError

logger = logging.getLogger(__name__)


class CreditLedger:
    """
    One credit per service per subscription-funded appointment.

    The ledger never commits. A failure leaves the caller's transaction to be
    rolled back, so a rejected booking consumes nothing.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_available_credit(self, client_id: str, service_id: str):
        return (
            self.db.query(SubscriptionCredit)
            .filter(
                SubscriptionCredit.client_id == client_id,
                SubscriptionCredit.service_id == service_id,
                SubscriptionCredit.remaining_credits > 0,
            )
            .order_by(SubscriptionCredit.renewal_date)
            .with_for_update()
            .first()
        )

    def consume_credits(self, client_id: str, services: list[Service]) -> list[SubscriptionCredit]:
        """
        Decrement one credit for every service.

        Raises:
            InsufficientCreditsError: naming the first service without a credit
        """
        located = []
        for service in services:
            credit = self.find_available_credit(client_id, service.id)
            if credit is None:
                logger.warning(f"⚠️ Client {client_id} has no credits left for service {service.id}")
                raise InsufficientCreditsError(service.name, service.id)
            located.append((service, credit))

        for service, credit in located:
            # Conditional decrement: a concurrent booking that drained the row makes this a no-op
            result = self.db.execute(
                update(SubscriptionCredit)
                .where(
                    SubscriptionCredit.id == credit.id,
                    SubscriptionCredit.remaining_credits > 0,
                )
                .values(
                    used_credits=SubscriptionCredit.used_credits + 1,
                    remaining_credits=SubscriptionCredit.remaining_credits - 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                logger.warning(f"⚠️ Credit {credit.id} was exhausted concurrently for client {client_id}")
                raise InsufficientCreditsError(service.name, service.id)
            self.db.expire(credit)

        logger.info(f"💳 Consumed {len(located)} credit(s) for client {client_id}")
        return [credit for _, credit in located]
