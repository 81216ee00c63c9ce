"""Shop repository - Database operations for the shop profile"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PetShop


class ShopRepository:
    """Repository for the singleton shop row"""

    @staticmethod
    def get_shop(db: Session, for_update: bool = False) -> Optional[PetShop]:
        query = db.query(PetShop).order_by(PetShop.created_at)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def save_shop(db: Session, shop: Optional[PetShop], name: str, working_hours: dict) -> PetShop:
        if shop is None:
            shop = PetShop(name=name, working_hours=working_hours)
            db.add(shop)
        else:
            shop.name = name
            shop.working_hours = working_hours
        db.commit()
        db.refresh(shop)
        return shop
