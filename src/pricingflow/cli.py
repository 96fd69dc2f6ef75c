"""Command-line entry point to run a scripted pricing workflow against a record store."""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from dotenv import load_dotenv

from .adapters.orders import cart_items_to_entities, make_order_saver
from .adapters.proofing import assets_to_entities, make_proofing_saver
from .config import WorkflowConfig
from .exceptions import PricingWorkflowError
from .finalizer import SaveCallback
from .models import PriceableEntity
from .reporting import describe_entity, make_summary_text, summary_frame, write_summary
from .script import DecisionScript, run_script
from .stores import OrderStore, ProofingStore
from .workflow import PricingWorkflow

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BLOCKED = 2


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the pricing approval workflow for an order or proofing request")
    parser.add_argument("--store", type=Path, required=True, help="JSON record store to read and update")
    parser.add_argument("--kind", choices=("order", "proofing"), default="order", help="Type of record in the store")
    parser.add_argument("--record-id", required=True, help="Order or proofing request identifier")
    parser.add_argument("--version", type=int, help="Proofing version to price (defaults to the latest)")
    parser.add_argument("--decisions", type=Path, required=True, help="YAML/JSON decision script")
    parser.add_argument("--config", type=Path, help="Optional workflow config (YAML/JSON)")
    parser.add_argument("--summary-out", type=Path, help="Write the final summary as CSV or XLSX")
    parser.add_argument("--dry-run", action="store_true", help="Run the workflow without writing the store")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _load_record(args: argparse.Namespace) -> tuple[List[PriceableEntity], SaveCallback]:
    if args.kind == "order":
        order_store = OrderStore.load(args.store)
        order = order_store.get(args.record_id)
        return cart_items_to_entities(order.items), make_order_saver(order_store, order.id)
    proofing_store = ProofingStore.load(args.store)
    request = proofing_store.get(args.record_id)
    version = request.get_version(args.version)
    return assets_to_entities(version.assets), make_proofing_saver(proofing_store, request.id, version.version)


async def _dry_run_save(final_entities: List[PriceableEntity]) -> None:
    LOGGER.info("Dry run: %d finalized entities not written", len(final_entities))


def run(args: argparse.Namespace) -> int:
    config = WorkflowConfig.load(args.config)
    script = DecisionScript.load(args.decisions)
    entities, saver = _load_record(args)
    if args.dry_run:
        saver = _dry_run_save

    workflow = PricingWorkflow(config)
    workflow.open(entities, saver)
    if not run_script(workflow, script):
        LOGGER.error("Approval incomplete; undecided entities: %s", ", ".join(workflow.undecided_ids()))
        workflow.close()
        return EXIT_BLOCKED

    result = asyncio.run(workflow.confirm())
    assert result is not None
    frame = summary_frame(result.entities)
    print(make_summary_text(frame, currency=config.currency_symbol), end="")
    for entity in result.entities:
        print(f"  {entity.label}: {describe_entity(entity, currency=config.currency_symbol)}")
    if args.summary_out:
        write_summary(frame, args.summary_out)
        LOGGER.info("Wrote pricing summary to %s", args.summary_out)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)
    try:
        return run(args)
    except (PricingWorkflowError, KeyError, ValueError, OSError, yaml.YAMLError) as exc:
        LOGGER.error("Pricing workflow failed: %s", exc)
        return EXIT_FAILED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
