"""Order line items as pricing workflow entities."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

from ..finalizer import SaveCallback
from ..models import DecisionStatus, PriceableEntity, timestamp

if TYPE_CHECKING:
    from ..stores import OrderStore

LOGGER = logging.getLogger(__name__)

DEFAULT_LOG_MESSAGE = "Item pricing workflow finalized"


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    price: float
    quantity: int = 1
    final_price: Optional[float] = None
    variant_description: Optional[str] = None
    pricing_status: Optional[DecisionStatus] = None

    @property
    def unit_price(self) -> float:
        return self.final_price if self.final_price is not None else self.price

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "final_price": self.final_price,
        }
        if self.variant_description:
            data["variant_description"] = self.variant_description
        if self.pricing_status:
            data["pricing_status"] = self.pricing_status.value
        return data

    @classmethod
    def from_dict(cls, raw: dict) -> "CartItem":
        status = raw.get("pricing_status")
        final_price = raw.get("final_price")
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            price=float(raw.get("price") or 0.0),
            quantity=int(raw.get("quantity", 1)),
            final_price=float(final_price) if final_price is not None else None,
            variant_description=raw.get("variant_description"),
            pricing_status=DecisionStatus(status) if status else None,
        )


@dataclass(frozen=True)
class OrderLogEntry:
    timestamp: str
    message: str


@dataclass(frozen=True)
class Order:
    id: str
    items: Tuple[CartItem, ...]
    status: str = "New Order"
    total: float = 0.0
    order_log: Tuple[OrderLogEntry, ...] = ()

    def with_items(
        self,
        items: Iterable[CartItem],
        log_message: str,
        moment: datetime | None = None,
    ) -> "Order":
        """Return a copy carrying ``items``, a recomputed total and a log entry."""
        items = tuple(items)
        total = sum(item.line_total for item in items)
        entry = OrderLogEntry(timestamp=timestamp(moment), message=log_message)
        return replace(self, items=items, total=total, order_log=self.order_log + (entry,))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
            "order_log": [{"timestamp": e.timestamp, "message": e.message} for e in self.order_log],
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Order":
        return cls(
            id=str(raw["id"]),
            items=tuple(CartItem.from_dict(item) for item in raw.get("items", [])),
            status=raw.get("status", "New Order"),
            total=float(raw.get("total") or 0.0),
            order_log=tuple(OrderLogEntry(**entry) for entry in raw.get("order_log", [])),
        )


def cart_item_label(item: CartItem) -> str:
    if item.variant_description:
        return f"{item.name} ({item.variant_description})"
    return item.name


def cart_items_to_entities(items: Iterable[CartItem]) -> List[PriceableEntity]:
    return [
        PriceableEntity(
            id=item.id,
            label=cart_item_label(item),
            base_price=item.price,
            proposed_price=item.final_price,
        )
        for item in items
    ]


def apply_to_cart_items(items: Sequence[CartItem], final_entities: Iterable[PriceableEntity]) -> List[CartItem]:
    """Write finalized prices back onto copies of ``items``."""
    by_id: Dict[str, PriceableEntity] = {entity.id: entity for entity in final_entities}
    updated: List[CartItem] = []
    for item in items:
        entity = by_id.get(item.id)
        if entity is None:
            updated.append(item)
            continue
        updated.append(
            replace(item, final_price=entity.effective_price, pricing_status=entity.decision_status)
        )
    return updated


def make_order_saver(
    store: "OrderStore",
    order_id: str,
    log_message: str = DEFAULT_LOG_MESSAGE,
) -> SaveCallback:
    async def _save(final_entities: List[PriceableEntity]) -> None:
        order = store.get(order_id)
        items = apply_to_cart_items(order.items, final_entities)
        store.commit(order.with_items(items, log_message))
        LOGGER.info("Persisted pricing for order %s", order_id)

    return _save


__all__ = [
    "CartItem",
    "Order",
    "OrderLogEntry",
    "apply_to_cart_items",
    "cart_item_label",
    "cart_items_to_entities",
    "make_order_saver",
]
