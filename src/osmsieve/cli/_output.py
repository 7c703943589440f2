"""Output helpers for the CLI's own reports (not the extraction result)."""

from __future__ import annotations

import json
import sys
from typing import Any


def print_rows(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print rows as aligned columns, or as a JSON array of objects."""
    if json_mode:
        print(json.dumps([dict(zip(headers, row)) for row in rows], indent=2, default=str))
        return
    if not rows:
        return

    cells = [[str(v) for v in row] for row in rows]
    widths = [max(len(h), *(len(row[i]) for row in cells)) for i, h in enumerate(headers)]
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip())
    print("  ".join("-" * w for w in widths))
    for row in cells:
        print("  ".join(v.ljust(w) for v, w in zip(row, widths)).rstrip())


def print_mapping(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a flat mapping as JSON or ``key: value`` lines."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return
    for k, v in data.items():
        print(f"{k}: {v}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)
