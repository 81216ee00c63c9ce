"""Shop service - Business logic for the shop profile and weekly schedule"""

import logging

from sqlalchemy.orm import Session

from ...models import PetShop
from ...shared.errors import ConfigMissingError
from .repository import ShopRepository
from .schemas import ShopUpdate

logger = logging.getLogger(__name__)


class ShopService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ShopRepository()

    def get_shop(self) -> PetShop:
        shop = self.repo.get_shop(self.db)
        if not shop:
            raise ConfigMissingError("The shop has not been configured yet")
        return shop

    def save_shop(self, data: ShopUpdate) -> PetShop:
        """Create the shop on first save, replace name and schedule afterwards"""
        working_hours = {
            day: schedule.model_dump(exclude_none=True) for day, schedule in data.workingHours.items()
        }
        shop = self.repo.get_shop(self.db, for_update=True)
        created = shop is None
        shop = self.repo.save_shop(self.db, shop, data.name, working_hours)
        open_days = sorted(day for day, schedule in working_hours.items() if schedule.get("open"))
        logger.info(
            f"{'🆕 Created' if created else '✅ Updated'} shop schedule, open on: {', '.join(open_days) or 'no days'}"
        )
        return shop
