from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from .contracts import GridAssemblyResult


def layout_manifest_payload(result: GridAssemblyResult) -> dict[str, Any]:
    """
    Placement-only view of an assembly: no paths, no backend bytes.

    Identical inputs (same filenames, same layout) give an identical payload.
    """

    return {
        "layout": asdict(result.layout),
        "geometry": asdict(result.geometry),
        "page_count": result.page_count,
        "tiles": [asdict(t) for t in result.tiles],
    }


def serialize_layout_manifest(result: GridAssemblyResult) -> str:
    payload = layout_manifest_payload(result)
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_layout_manifest_json(*, result: GridAssemblyResult, out_manifest: Path) -> None:
    out_manifest.parent.mkdir(parents=True, exist_ok=True)
    out_manifest.write_text(serialize_layout_manifest(result), encoding="utf-8")
