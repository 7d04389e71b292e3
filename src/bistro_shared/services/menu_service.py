"""
Menu catalog helpers.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.datastructures import FileStorage

from bistro_shared.db import Database
from bistro_shared.errors import NotFound, ValidationError
from bistro_shared.logging_config import get_logger
from bistro_shared.models import MenuItem
from bistro_shared.serializers import serialize_menu_item
from bistro_shared.services.image_service import ImageStore

logger = get_logger(__name__)


def coerce_price(value: Any) -> Decimal:
    """Convert a submitted price into a non-negative two-decimal amount."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Price must be a number") from exc
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number")
    return price.quantize(Decimal("0.01"))


class MenuService:
    def __init__(self, db: Database, images: ImageStore):
        self.db = db
        self.images = images

    def _get(self, session: Session, item_id: int) -> MenuItem:
        item = session.get(MenuItem, item_id)
        if item is None:
            raise NotFound("Menu item not found")
        return item

    def list_items(
        self, category: str | None = None, include_unavailable: bool = False
    ) -> list[dict[str, Any]]:
        stmt = select(MenuItem)
        if not include_unavailable:
            stmt = stmt.where(MenuItem.is_available.is_(True))
        if category:
            stmt = stmt.where(MenuItem.category == category)
        stmt = stmt.order_by(MenuItem.category.asc(), MenuItem.name.asc())

        with self.db.session() as session:
            return [serialize_menu_item(item) for item in session.execute(stmt).scalars()]

    def list_categories(self) -> list[str]:
        stmt = (
            select(MenuItem.category)
            .where(MenuItem.category.is_not(None))
            .distinct()
            .order_by(MenuItem.category.asc())
        )
        with self.db.session() as session:
            return [category for category in session.execute(stmt).scalars() if category]

    def get_item(self, item_id: int) -> dict[str, Any]:
        with self.db.session() as session:
            return serialize_menu_item(self._get(session, item_id))

    def create_item(
        self, data: dict[str, Any], upload: FileStorage | None = None
    ) -> dict[str, Any]:
        image = self.images.save(upload) if upload else (data.get("image") or "")
        try:
            with self.db.session() as session:
                item = MenuItem(
                    name=data["name"],
                    description=data.get("description") or "",
                    price=coerce_price(data["price"]),
                    category=data["category"],
                    image=image,
                    is_available=data.get("is_available", True),
                )
                session.add(item)
                session.flush()
                logger.info("Menu item %s created: %s", item.id, item.name)
                return serialize_menu_item(item)
        except Exception:
            # Nothing references the stored upload
            if upload:
                self.images.delete(image)
            raise

    def update_item(
        self, item_id: int, data: dict[str, Any], upload: FileStorage | None = None
    ) -> dict[str, Any]:
        """
        Apply a partial update. A new uploaded file or image URL replaces the
        old image, and a replaced local file is removed from disk.
        """
        saved = None
        try:
            with self.db.session() as session:
                item = self._get(session, item_id)
                old_image = item.image

                for field in ("name", "description", "category", "is_available"):
                    if data.get(field) is not None:
                        setattr(item, field, data[field])
                if data.get("price") is not None:
                    item.price = coerce_price(data["price"])

                if upload:
                    saved = item.image = self.images.save(upload)
                elif data.get("image") is not None:
                    item.image = data["image"]

                session.flush()
                result = serialize_menu_item(item)
        except Exception:
            if saved:
                self.images.delete(saved)
            raise

        if old_image and old_image != result["image"]:
            self.images.delete(old_image)
        return result

    def delete_item(self, item_id: int) -> None:
        """Delete a menu item. Orders keep their snapshot of it."""
        with self.db.session() as session:
            item = self._get(session, item_id)
            image = item.image
            session.delete(item)
        self.images.delete(image)
        logger.info("Menu item %s deleted", item_id)
