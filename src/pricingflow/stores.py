"""JSON-file record stores written to by the pricing save callbacks."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from .adapters.orders import Order
from .adapters.proofing import ProofingRequest

LOGGER = logging.getLogger(__name__)


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)


@dataclass
class OrderStore:
    path: Path
    orders: Dict[str, Order] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "OrderStore":
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        else:
            raw = {"orders": {}}
        orders = {
            str(order_id): Order.from_dict({"id": order_id, **data})
            for order_id, data in raw.get("orders", {}).items()
        }
        return cls(path=path, orders=orders)

    def _write(self, orders: Dict[str, Order]) -> None:
        _write_json(self.path, {"orders": {order_id: order.to_dict() for order_id, order in orders.items()}})
        LOGGER.debug("Wrote %d orders to %s", len(orders), self.path)

    def save(self) -> None:
        self._write(self.orders)

    def commit(self, order: Order) -> None:
        """Write ``order`` to disk, then hold it in memory once the write succeeded."""
        self._write({**self.orders, order.id: order})
        self.put(order)

    def get(self, order_id: str) -> Order:
        try:
            return self.orders[str(order_id)]
        except KeyError:
            raise KeyError(f"Could not find order with ID {order_id}") from None

    def put(self, order: Order) -> None:
        self.orders[order.id] = order


@dataclass
class ProofingStore:
    path: Path
    requests: Dict[str, ProofingRequest] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "ProofingStore":
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        else:
            raw = {"proofing_requests": {}}
        requests = {
            str(request_id): ProofingRequest.from_dict({"id": request_id, **data})
            for request_id, data in raw.get("proofing_requests", {}).items()
        }
        return cls(path=path, requests=requests)

    def _write(self, requests: Dict[str, ProofingRequest]) -> None:
        _write_json(
            self.path,
            {"proofing_requests": {request_id: request.to_dict() for request_id, request in requests.items()}},
        )
        LOGGER.debug("Wrote %d proofing requests to %s", len(requests), self.path)

    def save(self) -> None:
        self._write(self.requests)

    def commit(self, request: ProofingRequest) -> None:
        self._write({**self.requests, request.id: request})
        self.put(request)

    def get(self, request_id: str) -> ProofingRequest:
        try:
            return self.requests[str(request_id)]
        except KeyError:
            raise KeyError(f"Could not find proofing request with ID {request_id}") from None

    def put(self, request: ProofingRequest) -> None:
        self.requests[request.id] = request


__all__ = ["OrderStore", "ProofingStore"]
