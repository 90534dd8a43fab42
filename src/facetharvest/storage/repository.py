from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

import pandas as pd

from ..utils.logging import get_logger

logger = get_logger(__name__)

Document = Mapping[str, Sequence[Mapping[str, Optional[str]]]]

CSV_COLUMNS = ("facet", "position", "label", "id")


def save_document(document: Document, path: Path) -> Path:
    """Write the facet document as JSON, replacing the previous file atomically.

    Called after every facet, so a crash keeps everything harvested so far.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as fh:
        json.dump(document, fh, indent=2, ensure_ascii=False)
        fh.write("\n")
    os.replace(tmp, path)
    return path


def document_to_frame(document: Document) -> pd.DataFrame:
    """Flatten ``{facet: [{label, id}, ...]}`` into one row per option."""
    rows = []
    for facet, records in document.items():
        for position, record in enumerate(records, 1):
            rows.append(
                {
                    "facet": facet,
                    "position": position,
                    "label": record.get("label"),
                    "id": record.get("id"),
                }
            )
    return pd.DataFrame(rows, columns=list(CSV_COLUMNS))


def export_csv(document: Document, path: Path) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = document_to_frame(document)
    df.to_csv(path, index=False, encoding="utf-8-sig")
    logger.info("  [OK] %s: %d rows", path.name, len(df))
    return len(df)


def save_rows(rows: Sequence[Mapping], path: Path) -> int:
    """Save flat result rows (cruise cards) as JSON or CSV by suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        pd.DataFrame(list(rows)).to_csv(path, index=False, encoding="utf-8-sig")
    else:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(list(rows), fh, indent=2, ensure_ascii=False)
            fh.write("\n")
    logger.info("  [OK] %s: %d rows", path.name, len(rows))
    return len(rows)
