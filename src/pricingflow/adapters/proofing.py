"""Proofing version assets as pricing workflow entities."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..finalizer import SaveCallback
from ..models import DecisionStatus, PriceableEntity

if TYPE_CHECKING:
    from ..stores import ProofingStore

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofingAsset:
    url: str
    price: Optional[float] = None
    pricing_status: Optional[DecisionStatus] = None

    def to_dict(self) -> dict:
        data: dict = {"url": self.url}
        if self.price is not None:
            data["price"] = self.price
        if self.pricing_status:
            data["pricing_status"] = self.pricing_status.value
        return data

    @classmethod
    def from_dict(cls, raw: dict) -> "ProofingAsset":
        price = raw.get("price")
        status = raw.get("pricing_status")
        return cls(
            url=str(raw["url"]),
            price=float(price) if price is not None else None,
            pricing_status=DecisionStatus(status) if status else None,
        )


@dataclass(frozen=True)
class ProofingVersion:
    version: int
    assets: Tuple[ProofingAsset, ...] = ()
    notes: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "assets": [asset.to_dict() for asset in self.assets],
            "notes": self.notes,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "ProofingVersion":
        return cls(
            version=int(raw["version"]),
            assets=tuple(ProofingAsset.from_dict(asset) for asset in raw.get("assets", [])),
            notes=raw.get("notes", ""),
            created_at=raw.get("created_at", ""),
        )


@dataclass(frozen=True)
class ProofingRequest:
    id: str
    title: str
    status: str = "Out for Proof"
    versions: Tuple[ProofingVersion, ...] = ()

    @property
    def latest_version(self) -> Optional[ProofingVersion]:
        return self.versions[-1] if self.versions else None

    def get_version(self, number: Optional[int] = None) -> ProofingVersion:
        if number is None:
            latest = self.latest_version
            if latest is None:
                raise KeyError(f"Proofing request {self.id} has no versions")
            return latest
        for version in self.versions:
            if version.version == number:
                return version
        raise KeyError(f"Proofing request {self.id} has no version {number}")

    def with_version_assets(self, number: int, assets: Iterable[ProofingAsset]) -> "ProofingRequest":
        self.get_version(number)
        assets = tuple(assets)
        versions = tuple(
            replace(version, assets=assets) if version.version == number else version
            for version in self.versions
        )
        return replace(self, versions=versions)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "versions": [version.to_dict() for version in self.versions],
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "ProofingRequest":
        return cls(
            id=str(raw["id"]),
            title=raw.get("title", ""),
            status=raw.get("status", "Out for Proof"),
            versions=tuple(ProofingVersion.from_dict(version) for version in raw.get("versions", [])),
        )


def asset_label(asset: ProofingAsset) -> str:
    name = PurePosixPath(urlparse(asset.url).path).name
    return name or asset.url


def assets_to_entities(assets: Iterable[ProofingAsset]) -> List[PriceableEntity]:
    return [
        PriceableEntity(id=asset.url, label=asset_label(asset), base_price=asset.price or 0.0)
        for asset in assets
    ]


def apply_to_assets(assets: Sequence[ProofingAsset], final_entities: Iterable[PriceableEntity]) -> List[ProofingAsset]:
    """Write finalized prices back onto copies of ``assets``.

    Only approved prices are written; other assets keep their original price,
    which may be absent.
    """
    by_id: Dict[str, PriceableEntity] = {entity.id: entity for entity in final_entities}
    updated: List[ProofingAsset] = []
    for asset in assets:
        entity = by_id.get(asset.url)
        if entity is None:
            updated.append(asset)
            continue
        price = entity.effective_price if entity.decision_status == DecisionStatus.APPROVED else asset.price
        updated.append(replace(asset, price=price, pricing_status=entity.decision_status))
    return updated


def make_proofing_saver(store: "ProofingStore", request_id: str, version: Optional[int] = None) -> SaveCallback:
    async def _save(final_entities: List[PriceableEntity]) -> None:
        request = store.get(request_id)
        target = request.get_version(version)
        assets = apply_to_assets(target.assets, final_entities)
        store.commit(request.with_version_assets(target.version, assets))
        LOGGER.info("Persisted asset pricing for proofing request %s v%d", request_id, target.version)

    return _save


__all__ = [
    "ProofingAsset",
    "ProofingRequest",
    "ProofingVersion",
    "apply_to_assets",
    "asset_label",
    "assets_to_entities",
    "make_proofing_saver",
]
