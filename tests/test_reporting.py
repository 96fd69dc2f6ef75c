from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from pricingflow.models import DecisionStatus, PriceableEntity
from pricingflow.reporting import SUMMARY_COLUMNS, describe_entity, make_summary_text, summary_frame, write_summary


@pytest.fixture
def final_entities():
    return [
        PriceableEntity("a", "Poster", 10.0, 10.0, DecisionStatus.SKIPPED),
        PriceableEntity("b", "Mug", 20.0, 25.0, DecisionStatus.APPROVED),
        PriceableEntity("c", "Cap", 5.0, 5.0, DecisionStatus.REJECTED),
    ]


def test_describe_entity(final_entities) -> None:
    assert describe_entity(final_entities[0]) == "Skipped (uses $10.00)"
    assert describe_entity(final_entities[1]) == "$25.00"
    assert describe_entity(final_entities[2], currency="EUR ") == "Rejected (reverts to EUR 5.00)"
    assert describe_entity(PriceableEntity("d", "Pin", 1.0)) == "Pending Approval"


def test_summary_frame(final_entities) -> None:
    frame = summary_frame(final_entities)
    assert list(frame.columns) == SUMMARY_COLUMNS
    assert frame["DELTA"].tolist() == [0.0, 5.0, 0.0]
    assert frame["STATUS"].tolist() == ["skipped", "approved", "rejected"]


def test_make_summary_text(final_entities) -> None:
    text = make_summary_text(summary_frame(final_entities))
    assert "Priced 3 entities: 0 pending, 1 skipped, 1 approved, 1 rejected." in text
    assert "final subtotal $40.00" in text
    assert "Mug" in text
    assert make_summary_text(summary_frame([])) == "No entities were priced.\n"


def test_write_summary_csv_and_xlsx(tmp_path: Path, final_entities) -> None:
    frame = summary_frame(final_entities)
    csv_path = write_summary(frame, tmp_path / "out" / "summary.csv")
    xlsx_path = write_summary(frame, tmp_path / "out" / "summary.xlsx")

    assert pd.read_csv(csv_path)["FINAL_PRICE"].tolist() == [10.0, 25.0, 5.0]
    assert pd.read_excel(xlsx_path, sheet_name="Pricing")["ID"].tolist() == ["a", "b", "c"]
