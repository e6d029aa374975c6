"""
Helpers to turn option lists and match views into a compact, human-readable
console table.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from airwayfit.models.outputs import BrandOption, EttNameOption, MatchView, Verdict


VERDICT_LABELS = {
    Verdict.FIT: "FIT",
    Verdict.TIGHT: "TIGHT",
    Verdict.NO_FIT: "NO FIT",
    Verdict.UNKNOWN: "?",
}

ROW_HEADERS = ("ID mm", "Type", "OD mm", "Model", "Manufacturer", "Gap mm", "Verdict")


def _fmt_float(value: Any, decimals: int = 2, missing: str = "-") -> str:
    """Safely format a float."""
    try:
        fval = float(value)
    except (TypeError, ValueError):
        return missing
    return f"{fval:.{decimals}f}"


def format_table(headers: tuple[str, ...], rows: list[tuple[str, ...]]) -> list[str]:
    """Left-aligned columns sized to their widest cell."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells: tuple[str, ...]) -> str:
        return "  ".join(cell.ljust(w) for cell, w in zip(cells, widths)).rstrip()

    lines = [line(headers), line(tuple("-" * w for w in widths))]
    lines.extend(line(row) for row in rows)
    return lines


def print_brand_options(options: list[BrandOption], file: TextIO = sys.stdout) -> None:
    """Print SAD brand/model options with the keys used to select them."""
    if not options:
        print("No airway devices in catalog.", file=file)
        return
    rows = [
        (o.display_name, o.display_manufacturer or "-", o.key.name, o.key.manufacturer or "-")
        for o in options
    ]
    for text in format_table(("Device", "Manufacturer", "Name key", "Manufacturer key"), rows):
        print(text, file=file)


def print_ett_options(options: list[EttNameOption], file: TextIO = sys.stdout) -> None:
    """Print ETT name options."""
    if not options:
        print("No endotracheal tubes in catalog.", file=file)
        return
    for text in format_table(("Tube", "Key"), [(o.label, o.key) for o in options]):
        print(text, file=file)


def print_match_view(view: MatchView, show_worst_case: bool = True, file: TextIO = sys.stdout) -> None:
    """
    Print a match view as a table.

    Args:
        view: Result of run_match
        show_worst_case: Also print the worst-case OD per nominal size
        file: Output stream
    """
    print(
        f"SAD inner diameter: {_fmt_float(view.sad_inner_mm, 1)} mm | "
        f"tolerance: {_fmt_float(view.tolerance_mm)} mm",
        file=file,
    )

    if view.rows:
        rows = [
            (
                row.size_label,
                row.type,
                row.outer_label,
                row.model,
                row.manufacturer or "-",
                _fmt_float(row.gap_mm),
                VERDICT_LABELS[row.verdict],
            )
            for row in view.rows
        ]
        print("", file=file)
        for text in format_table(ROW_HEADERS, rows):
            print(text, file=file)

    if view.empty and view.message:
        print(f"\n{view.message}", file=file)

    if show_worst_case and view.worst_case:
        print("\nWorst case by ETT size (largest OD of any model):", file=file)
        rows = [
            (
                _fmt_float(w.size_mm, 1),
                _fmt_float(w.outer_diameter_mm),
                _fmt_float(w.gap_mm),
                VERDICT_LABELS[w.verdict],
            )
            for w in view.worst_case
        ]
        for text in format_table(("ID mm", "Max OD mm", "Gap mm", "Verdict"), rows):
            print(f"  {text}", file=file)

    for note in view.notes:
        print(f"  - {note}", file=file)
    for warning in view.warnings:
        print(f"  ! {warning}", file=file)
