"""Mappings between caller domain records and pricing workflow entities."""

from .orders import CartItem, Order, apply_to_cart_items, cart_items_to_entities, make_order_saver
from .proofing import (
    ProofingAsset,
    ProofingRequest,
    ProofingVersion,
    apply_to_assets,
    assets_to_entities,
    make_proofing_saver,
)

__all__ = [
    "CartItem",
    "Order",
    "apply_to_cart_items",
    "cart_items_to_entities",
    "make_order_saver",
    "ProofingAsset",
    "ProofingRequest",
    "ProofingVersion",
    "apply_to_assets",
    "assets_to_entities",
    "make_proofing_saver",
]
