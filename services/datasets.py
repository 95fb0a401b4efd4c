# services/datasets.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from services.errors import DatasetMissing
from services.hazard_index import HazardIndex

logger = logging.getLogger(__name__)


def _rows(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        items = data.get("items")
        if isinstance(items, list):
            return items
    return []

def load_bridges(path: str) -> List[Dict[str, Any]]:
    """Bridges are the primary safety signal: a missing file is fatal."""
    p = Path(path)
    if not p.exists():
        raise DatasetMissing(f"Bridges dataset not found: {p}")
    rows = _rows(json.loads(p.read_text(encoding="utf-8")))
    logger.info("Loaded %d bridge rows from %s", len(rows), p)
    return rows

def load_zones(path: Optional[str]) -> List[Dict[str, Any]]:
    """Zone files are optional; anything unreadable counts as no zones."""
    if not path:
        return []
    p = Path(path)
    if not p.exists():
        logger.warning("Zone dataset not found, continuing without it: %s", p)
        return []
    text = p.read_text(encoding="utf-8")
    if not text.strip():
        return []
    try:
        rows = _rows(json.loads(text))
    except json.JSONDecodeError as e:
        logger.warning("Zone dataset %s is not valid JSON (%s); ignoring it", p, e)
        return []
    logger.info("Loaded %d zone rows from %s", len(rows), p)
    return rows

def build_hazard_index(bridges_path: str,
                       no_truck_path: Optional[str] = None,
                       residential_path: Optional[str] = None) -> HazardIndex:
    index = HazardIndex.from_records(
        load_bridges(bridges_path),
        load_zones(no_truck_path),
        load_zones(residential_path),
    )
    logger.info("Hazard index ready: %r", index)
    return index
