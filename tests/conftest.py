from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest

from pricingflow.adapters.orders import CartItem, Order
from pricingflow.adapters.proofing import ProofingAsset, ProofingRequest, ProofingVersion
from pricingflow.config import WorkflowConfig
from pricingflow.models import PriceableEntity
from pricingflow.stores import OrderStore, ProofingStore
from pricingflow.workflow import PricingWorkflow


@pytest.fixture
def entity_factory() -> Callable[..., PriceableEntity]:
    def _create(entity_id: str, base_price: float, **kwargs) -> PriceableEntity:
        return PriceableEntity(id=entity_id, label=kwargs.pop("label", f"Item {entity_id}"), base_price=base_price, **kwargs)

    return _create


@pytest.fixture
def two_entities(entity_factory) -> List[PriceableEntity]:
    return [entity_factory("a", 10.0), entity_factory("b", 20.0)]


@pytest.fixture
def config(monkeypatch) -> WorkflowConfig:
    for key in [
        "PRICING_INVALID_PRICE_FALLBACK",
        "PRICING_PENDING_AT_FINALIZE",
        "PRICING_CURRENCY_SYMBOL",
        "PRICING_SAVE_RETRIES",
        "PRICING_SAVE_BACKOFF",
        "PRICING_SAVE_TIMEOUT",
    ]:
        monkeypatch.delenv(key, raising=False)
    return WorkflowConfig()


@pytest.fixture
def saved() -> List[List[PriceableEntity]]:
    return []


@pytest.fixture
def recording_save(saved):
    async def _save(final_entities: List[PriceableEntity]) -> None:
        saved.append(final_entities)

    return _save


@pytest.fixture
def workflow(config) -> PricingWorkflow:
    return PricingWorkflow(config)


@pytest.fixture
def order_store(tmp_path: Path) -> OrderStore:
    store = OrderStore(path=tmp_path / "orders.json")
    store.put(
        Order(
            id="1001",
            items=(
                CartItem(id="i-1", name="Poster", price=10.0, quantity=2, final_price=10.0),
                CartItem(id="i-2", name="Mug", price=20.0, quantity=1, variant_description="Blue"),
            ),
            total=40.0,
        )
    )
    store.save()
    return store


@pytest.fixture
def proofing_store(tmp_path: Path) -> ProofingStore:
    store = ProofingStore(path=tmp_path / "proofing.json")
    store.put(
        ProofingRequest(
            id="req-1",
            title="Spring catalogue",
            versions=(
                ProofingVersion(version=1, assets=(ProofingAsset(url="https://cdn.example.com/v1/cover.png"),)),
                ProofingVersion(
                    version=2,
                    assets=(
                        ProofingAsset(url="https://cdn.example.com/v2/cover.png", price=15.0),
                        ProofingAsset(url="https://cdn.example.com/v2/back.png"),
                    ),
                ),
            ),
        )
    )
    store.save()
    return store
