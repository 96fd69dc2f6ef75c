from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from .models import DecisionStatus, PriceableEntity

SUMMARY_COLUMNS = ["ID", "LABEL", "STATUS", "BASE_PRICE", "FINAL_PRICE", "DELTA"]


def describe_entity(entity: PriceableEntity, currency: str = "$") -> str:
    """Summary-step wording for one entity's outcome."""
    status = entity.decision_status
    if status == DecisionStatus.APPROVED:
        return f"{currency}{entity.effective_price:.2f}"
    if status == DecisionStatus.REJECTED:
        return f"Rejected (reverts to {currency}{entity.base_price:.2f})"
    if status == DecisionStatus.SKIPPED:
        return f"Skipped (uses {currency}{entity.base_price:.2f})"
    return "Pending Approval"


def summary_frame(entities: Iterable[PriceableEntity]) -> pd.DataFrame:
    rows = [
        {
            "ID": entity.id,
            "LABEL": entity.label,
            "STATUS": entity.decision_status.value,
            "BASE_PRICE": float(entity.base_price),
            "FINAL_PRICE": float(entity.effective_price),
        }
        for entity in entities
    ]
    frame = pd.DataFrame(rows, columns=SUMMARY_COLUMNS[:-1])
    frame["DELTA"] = frame["FINAL_PRICE"] - frame["BASE_PRICE"]
    return frame[SUMMARY_COLUMNS]


def make_summary_text(frame: pd.DataFrame, currency: str = "$") -> str:
    if frame.empty:
        return "No entities were priced.\n"
    counts = frame["STATUS"].value_counts()
    changed = frame.loc[frame["DELTA"].abs() > 0]
    lines = [
        f"Priced {len(frame)} entities: "
        + ", ".join(f"{counts.get(status.value, 0)} {status.value}" for status in DecisionStatus)
        + ".",
        f"Base subtotal {currency}{frame['BASE_PRICE'].sum():,.2f}; "
        f"final subtotal {currency}{frame['FINAL_PRICE'].sum():,.2f}.",
    ]
    if not changed.empty:
        lines.append(f"Price changes:\n{changed[['ID', 'LABEL', 'BASE_PRICE', 'FINAL_PRICE']].to_string(index=False)}")
    return "\n".join(lines) + "\n"


def write_summary(frame: pd.DataFrame, path: Path) -> Path:
    """Write the summary frame as CSV, or XLSX when the suffix asks for it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        frame.to_excel(path, index=False, sheet_name="Pricing", engine="openpyxl")
    else:
        frame.to_csv(path, index=False)
    return path


__all__ = ["SUMMARY_COLUMNS", "describe_entity", "summary_frame", "make_summary_text", "write_summary"]
