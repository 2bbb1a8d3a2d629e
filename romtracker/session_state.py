"""Persistent match state helpers shared by the CLI and the web host."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .orchestrator import MatchOrchestrator

SESSION_STATE_PATH = Path.home() / ".romtracker" / "session_state.json"
SNAPSHOT_VERSION = 1

logger = logging.getLogger(__name__)


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def build_snapshot(orchestrator: MatchOrchestrator) -> Dict[str, Any]:
    """Versioned snapshot of an orchestrator, ready for ``save_snapshot``."""
    return {"version": SNAPSHOT_VERSION, **orchestrator.to_snapshot()}


def save_snapshot(snapshot: Dict[str, Any], path: Path = SESSION_STATE_PATH) -> None:
    path = Path(path)
    _ensure_parent(path)
    path.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved match state to %s", path)


def load_snapshot(path: Path = SESSION_STATE_PATH) -> Dict[str, Any]:
    """Return the stored snapshot, or {} when it is missing or unreadable."""
    path = Path(path)
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable match state %s: %s", path, e)
        return {}
    if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
        logger.warning("Ignoring match state %s with unknown version", path)
        return {}
    return data


def clear_snapshot(path: Path = SESSION_STATE_PATH) -> None:
    path = Path(path)
    if path.exists():
        path.unlink()


def restore_orchestrator(snapshot: Dict[str, Any], chunk_size: int = 250,
                         max_workers: int = 1) -> MatchOrchestrator:
    if not snapshot:
        return MatchOrchestrator(chunk_size=chunk_size, max_workers=max_workers)
    orchestrator = MatchOrchestrator.restore(snapshot, chunk_size=chunk_size,
                                             max_workers=max_workers)
    logger.info("Restored match state: %d catalogs, %d owned lists, %d results",
                len(orchestrator.catalogs), len(orchestrator.owned_lists),
                len(orchestrator.results))
    return orchestrator
