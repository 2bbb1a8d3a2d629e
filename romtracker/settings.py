"""Application settings for romtracker."""
from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from typing import Any, Dict

DEFAULT_SETTINGS_PATH = os.path.expanduser("~/.romtracker/settings.json")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "matching": {
        "chunk_size": 250,
        "max_workers": 1,
    },
    "state_path": os.path.expanduser("~/.romtracker/session_state.json"),
    "logging": {
        "file": "",
        "echo": False,
    },
    "web": {
        "host": "127.0.0.1",
        "port": 5000,
    },
}

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    out = deepcopy(base)
    for k, v in (updates or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = deepcopy(v)
    return out


def load_settings(path: str = DEFAULT_SETTINGS_PATH) -> Dict[str, Any]:
    if not os.path.exists(path):
        return deepcopy(DEFAULT_SETTINGS)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Falling back to default settings, %s is unreadable: %s", path, e)
        return deepcopy(DEFAULT_SETTINGS)
    return _deep_merge(DEFAULT_SETTINGS, data)


def save_settings(settings: Dict[str, Any], path: str = DEFAULT_SETTINGS_PATH) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings, f, ensure_ascii=False, indent=2)


def matching_options(settings: Dict[str, Any]) -> Dict[str, int]:
    """chunk_size/max_workers keyword arguments, clamped to at least 1."""
    matching = settings.get("matching", {})
    return {
        "chunk_size": max(1, int(matching.get("chunk_size", 250))),
        "max_workers": max(1, int(matching.get("max_workers", 1))),
    }
