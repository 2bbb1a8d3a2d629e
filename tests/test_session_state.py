import json
import os
import tempfile
from pathlib import Path

from romtracker.models import CatalogEntry, OwnedItem, OwnedList, ParsedCatalog
from romtracker.orchestrator import MatchOrchestrator
from romtracker.session_state import (
    build_snapshot, clear_snapshot, load_snapshot, restore_orchestrator, save_snapshot,
)


def _orchestrator():
    orch = MatchOrchestrator()
    orch.add_catalog(ParsedCatalog("testsys.dat", "TestSys", [
        CatalogEntry(reference_name="a.zip", description="Alpha (USA)", region="USA"),
        CatalogEntry(reference_name="a_eu.zip", description="Alpha (Europe)", region="Europe"),
    ]))
    orch.set_owned_list(OwnedList("TestSys", [OwnedItem("a.zip")]))
    orch.match()
    return orch


def test_snapshot_survives_save_and_load():
    orch = _orchestrator()
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'nested' / 'state.json'
        save_snapshot(build_snapshot(orch), path)

        snapshot = load_snapshot(path)
        assert snapshot['version'] == 1
        assert set(snapshot) == {'version', 'state', 'results', 'catalogs', 'owned_lists'}

        restored = restore_orchestrator(snapshot)
        assert restored.results == orch.results
        assert restored.state == orch.state
        assert list(restored.catalogs) == ["TestSys"]

        clear_snapshot(path)
        assert not path.exists()
        clear_snapshot(path)


def test_missing_or_corrupt_snapshot_loads_empty():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / 'state.json'
        assert load_snapshot(path) == {}

        path.write_text("{not json", encoding="utf-8")
        assert load_snapshot(path) == {}

        path.write_text(json.dumps({'version': 99}), encoding="utf-8")
        assert load_snapshot(path) == {}


def test_restore_from_empty_snapshot():
    orch = restore_orchestrator({}, chunk_size=10)
    assert orch.results == []
    assert orch.chunk_size == 10
    assert orch.state.is_baseline_empty
