"""
Incremental match orchestration across platforms.

The functions here take the run state and the current inputs as explicit
values and hand back new ones; nothing is kept in module globals. The
MatchOrchestrator class wraps them for hosts that prefer an object holding
the working set.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import MatchCancelledError, RomTrackerError
from .matcher import matches_normalized
from .models import (
    CatalogEntry, MatchKind, MatchResult, MatchRunState, OwnedList,
    ParsedCatalog, ProgressEvent,
)
from .normalizer import normalize
from .regions import OwnedIndex, RegionIndex, find_alternate_regions

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 250

ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class ChangeSet:
    """Outcome of comparing the current inputs with the stored fingerprints"""
    state: MatchRunState
    results: List[MatchResult]
    deleted: List[str] = field(default_factory=list)
    queued: List[str] = field(default_factory=list)
    needs_match: bool = False


@dataclass
class PassOutcome:
    """Committed result of a completed match pass"""
    state: MatchRunState
    results: List[MatchResult]
    events: List[ProgressEvent] = field(default_factory=list)
    processed: List[str] = field(default_factory=list)
    skipped: int = 0


def _catalogs_by_platform(catalogs: Sequence[ParsedCatalog]) -> Dict[str, ParsedCatalog]:
    by_platform: Dict[str, ParsedCatalog] = {}
    for catalog in catalogs:
        by_platform.setdefault(catalog.platform_name, catalog)
    return by_platform


def _owned_by_platform(owned_lists: Sequence[OwnedList]) -> Dict[str, OwnedList]:
    by_platform: Dict[str, OwnedList] = {}
    for owned in owned_lists:
        by_platform.setdefault(owned.platform_name, owned)
    return by_platform


def matchable_platforms(catalogs: Sequence[ParsedCatalog],
                        owned_lists: Sequence[OwnedList]) -> List[str]:
    """Platforms with both a catalog and an owned list, in catalog order."""
    owned = _owned_by_platform(owned_lists)
    return [p for p in _catalogs_by_platform(catalogs) if p in owned]


def _is_stale(state: MatchRunState, catalog: ParsedCatalog, owned: OwnedList) -> bool:
    platform = catalog.platform_name
    return (state.catalog_fingerprints.get(platform) != catalog.fingerprint()
            or state.owned_fingerprints.get(platform) != owned.fingerprint())


def pass_targets(state: MatchRunState, catalogs: Sequence[ParsedCatalog],
                 owned_lists: Sequence[OwnedList]) -> List[str]:
    """
    Platforms the next pass should match.

    Queued platforms when there are any. Otherwise every matchable platform
    on an empty state, or only those whose fingerprints are missing or
    out of date once a baseline exists.
    """
    current = matchable_platforms(catalogs, owned_lists)
    if state.pending:
        return [p for p in state.pending if p in current]
    if state.is_baseline_empty:
        return current
    cats = _catalogs_by_platform(catalogs)
    owned = _owned_by_platform(owned_lists)
    return [p for p in current if _is_stale(state, cats[p], owned[p])]


def detect_changes(state: MatchRunState, catalogs: Sequence[ParsedCatalog],
                   owned_lists: Sequence[OwnedList],
                   results: Sequence[MatchResult]) -> ChangeSet:
    """
    Reconcile stored fingerprints with the current inputs.

    Platforms that are no longer matchable lose their results, fingerprints
    and queue entries right away. Platforms whose catalog or owned list
    changed are queued, but only once a baseline exists; on an empty state
    the next pass simply covers everything.
    """
    current = matchable_platforms(catalogs, owned_lists)
    current_set = set(current)
    cats = _catalogs_by_platform(catalogs)
    owned = _owned_by_platform(owned_lists)

    new_state = state.copy()
    known = (set(new_state.catalog_fingerprints) | set(new_state.owned_fingerprints)
             | {r.platform_name for r in results})
    deleted = sorted(p for p in known if p not in current_set)
    for platform in deleted:
        new_state.catalog_fingerprints.pop(platform, None)
        new_state.owned_fingerprints.pop(platform, None)
    new_state.pending = [p for p in new_state.pending if p in current_set]

    kept = [r for r in results if r.platform_name in current_set]

    queued = []
    if not new_state.is_baseline_empty:
        for platform in current:
            changed = _is_stale(new_state, cats[platform], owned[platform])
            if changed and platform not in new_state.pending:
                new_state.pending.append(platform)
                queued.append(platform)

    needs_match = bool(new_state.pending) or any(
        p not in new_state.catalog_fingerprints for p in current
    )

    if deleted:
        logger.info("Purged platforms no longer in the working set: %s", ", ".join(deleted))
    if queued:
        logger.info("Queued for matching: %s", ", ".join(queued))

    return ChangeSet(state=new_state, results=kept, deleted=deleted,
                     queued=queued, needs_match=needs_match)


def full_rematch(state: MatchRunState,
                 results: Sequence[MatchResult]) -> Tuple[MatchRunState, List[MatchResult]]:
    """Forget every fingerprint and result so the next pass covers everything."""
    logger.info("Full re-match requested (%d results dropped)", len(results))
    return MatchRunState(), []


def rematch_platform(state: MatchRunState, results: Sequence[MatchResult],
                     platform: str) -> Tuple[MatchRunState, List[MatchResult]]:
    """Drop one platform's results and fingerprints and queue it."""
    new_state = state.copy()
    new_state.catalog_fingerprints.pop(platform, None)
    new_state.owned_fingerprints.pop(platform, None)
    if platform not in new_state.pending:
        new_state.pending.append(platform)
    logger.info("Re-match requested for %s", platform)
    return new_state, [r for r in results if r.platform_name != platform]


def match_entry(entry: CatalogEntry, platform_name: str, owned_index: OwnedIndex,
                region_index: RegionIndex) -> MatchResult:
    """Match one catalog entry against a platform's owned list."""
    target = entry.match_name
    matched = owned_index.by_name.get(target)
    kind = MatchKind.EXACT if matched is not None else None

    if matched is None:
        target_norm = normalize(target)
        for item, item_norm in owned_index.normalized:
            if matches_normalized(item_norm, target_norm):
                matched, kind = item, MatchKind.FUZZY
                break

    alternates = find_alternate_regions(entry, region_index, owned_index)
    return MatchResult(
        entry=entry,
        platform_name=platform_name,
        owned=matched is not None,
        matched_item=matched,
        match_kind=kind,
        alternate_regions=alternates or None,
    )


class MatchPass:
    """
    One matching pass over the platforms chosen by ``pass_targets``.

    Iterating the pass does the work in chunks and yields a ProgressEvent
    after each chunk. Once iteration is exhausted, ``outcome`` holds the
    merged results and the updated state. A cancelled pass never commits.
    """

    def __init__(self, state: MatchRunState, catalogs: Sequence[ParsedCatalog],
                 owned_lists: Sequence[OwnedList], results: Sequence[MatchResult],
                 chunk_size: int = DEFAULT_CHUNK_SIZE, max_workers: int = 1):
        self.state = state
        self.results = list(results)
        self.chunk_size = max(1, chunk_size)
        self.max_workers = max(1, max_workers)
        self._catalogs = _catalogs_by_platform(catalogs)
        self._owned = _owned_by_platform(owned_lists)
        self.targets = pass_targets(state, catalogs, owned_lists)
        self.total_count = sum(len(self._catalogs[p].entries) for p in self.targets)
        self._cancelled = False
        self._outcome: Optional[PassOutcome] = None

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def outcome(self) -> PassOutcome:
        if self._outcome is None:
            raise MatchCancelledError("Match pass was cancelled or has not finished")
        return self._outcome

    def __iter__(self) -> Iterator[ProgressEvent]:
        if self._outcome is not None:
            return
        logger.info("Match pass started: %d platforms, %d entries",
                    len(self.targets), self.total_count)
        if self.max_workers > 1 and len(self.targets) > 1:
            yield from self._run_parallel()
        else:
            yield from self._run_sequential()

    def _indexes(self, platform: str) -> Tuple[ParsedCatalog, OwnedIndex, RegionIndex]:
        catalog = self._catalogs[platform]
        return (catalog, OwnedIndex(self._owned[platform].items),
                RegionIndex(catalog.entries))

    def _match_safely(self, entry: CatalogEntry, platform: str, owned_index: OwnedIndex,
                      region_index: RegionIndex) -> Optional[MatchResult]:
        if not getattr(entry, 'reference_name', None):
            logger.warning("Skipping entry without a reference name on %s", platform)
            return None
        try:
            return match_entry(entry, platform, owned_index, region_index)
        except (AttributeError, TypeError, ValueError):
            logger.exception("Skipping entry %r on %s", entry.reference_name, platform)
            return None

    def _run_sequential(self) -> Iterator[ProgressEvent]:
        new_results: Dict[str, List[MatchResult]] = {}
        events: List[ProgressEvent] = []
        done = 0
        skipped = 0

        for platform in self.targets:
            catalog, owned_index, region_index = self._indexes(platform)
            platform_results: List[MatchResult] = []
            entries = catalog.entries
            for start in range(0, len(entries), self.chunk_size):
                if self._cancelled:
                    logger.info("Match pass cancelled at %d/%d", done, self.total_count)
                    return
                chunk = entries[start:start + self.chunk_size]
                for entry in chunk:
                    result = self._match_safely(entry, platform, owned_index, region_index)
                    if result is None:
                        skipped += 1
                    else:
                        platform_results.append(result)
                done += len(chunk)
                event = ProgressEvent(done, self.total_count, platform)
                events.append(event)
                yield event
            new_results[platform] = platform_results

        if self._cancelled:
            return
        self._commit(new_results, events, skipped)

    def _match_platform(self, platform: str) -> Tuple[List[MatchResult], int]:
        catalog, owned_index, region_index = self._indexes(platform)
        platform_results = []
        skipped = 0
        for entry in catalog.entries:
            result = self._match_safely(entry, platform, owned_index, region_index)
            if result is None:
                skipped += 1
            else:
                platform_results.append(result)
        return platform_results, skipped

    def _run_parallel(self) -> Iterator[ProgressEvent]:
        # Workers only read their own platform's inputs; merging happens here.
        new_results: Dict[str, List[MatchResult]] = {}
        events: List[ProgressEvent] = []
        done = 0
        skipped = 0

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='match') as executor:
            futures = {executor.submit(self._match_platform, p): p for p in self.targets}
            for future in as_completed(futures):
                if self._cancelled:
                    for pending in futures:
                        pending.cancel()
                    logger.info("Match pass cancelled at %d/%d", done, self.total_count)
                    return
                platform = futures[future]
                platform_results, platform_skipped = future.result()
                new_results[platform] = platform_results
                skipped += platform_skipped
                done += len(self._catalogs[platform].entries)
                event = ProgressEvent(done, self.total_count, platform)
                events.append(event)
                yield event

        if self._cancelled:
            return
        self._commit(new_results, events, skipped)

    def _commit(self, new_results: Dict[str, List[MatchResult]],
                events: List[ProgressEvent], skipped: int) -> None:
        processed = [p for p in self.targets if p in new_results]
        processed_set = set(processed)

        merged = [r for r in self.results if r.platform_name not in processed_set]
        for platform in processed:
            merged.extend(new_results[platform])

        state = self.state.copy()
        for platform in processed:
            state.catalog_fingerprints[platform] = self._catalogs[platform].fingerprint()
            state.owned_fingerprints[platform] = self._owned[platform].fingerprint()
        state.pending = []

        if skipped:
            logger.warning("Match pass skipped %d malformed entries", skipped)
        logger.info("Match pass finished: %d platforms, %d results",
                    len(processed), len(merged))
        self._outcome = PassOutcome(state=state, results=merged, events=events,
                                    processed=processed, skipped=skipped)


def run_pass(state: MatchRunState, catalogs: Sequence[ParsedCatalog],
             owned_lists: Sequence[OwnedList], results: Sequence[MatchResult],
             progress_callback: Optional[ProgressCallback] = None,
             chunk_size: int = DEFAULT_CHUNK_SIZE, max_workers: int = 1) -> PassOutcome:
    """Run a full match pass to completion and return its outcome."""
    match_pass = MatchPass(state, catalogs, owned_lists, results,
                           chunk_size=chunk_size, max_workers=max_workers)
    for event in match_pass:
        if progress_callback:
            progress_callback(event)
    return match_pass.outcome


class MatchOrchestrator:
    """
    Holds the working set (catalogs and owned lists keyed by platform), the
    run state and the current results.

    Adding a catalog or owned list for a platform that already has one
    replaces it. The working set cannot change while a pass is running;
    mutators raise RomTrackerError until it finishes.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, max_workers: int = 1,
                 state: Optional[MatchRunState] = None,
                 results: Optional[Sequence[MatchResult]] = None):
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.catalogs: Dict[str, ParsedCatalog] = {}
        self.owned_lists: Dict[str, OwnedList] = {}
        self.state = state or MatchRunState()
        self.results: List[MatchResult] = list(results or [])
        self.last_outcome: Optional[PassOutcome] = None
        self._active_pass: Optional[MatchPass] = None
        self._matching = False
        # guards the working set, state, results and the matching flag
        self._lock = threading.Lock()

    @property
    def platforms(self) -> List[str]:
        return matchable_platforms(list(self.catalogs.values()),
                                   list(self.owned_lists.values()))

    @property
    def is_matching(self) -> bool:
        return self._matching

    def _ensure_idle(self) -> None:
        if self._matching:
            raise RomTrackerError("A match pass is running")

    def add_catalog(self, catalog: ParsedCatalog) -> ChangeSet:
        with self._lock:
            self._ensure_idle()
            self.catalogs[catalog.platform_name] = catalog
            return self._refresh()

    def remove_catalog(self, platform: str) -> ChangeSet:
        with self._lock:
            self._ensure_idle()
            self.catalogs.pop(platform, None)
            return self._refresh()

    def set_owned_list(self, owned: OwnedList) -> ChangeSet:
        with self._lock:
            self._ensure_idle()
            self.owned_lists[owned.platform_name] = owned
            return self._refresh()

    def remove_owned_list(self, platform: str) -> ChangeSet:
        with self._lock:
            self._ensure_idle()
            self.owned_lists.pop(platform, None)
            return self._refresh()

    def refresh(self) -> ChangeSet:
        with self._lock:
            self._ensure_idle()
            return self._refresh()

    def _refresh(self) -> ChangeSet:
        changes = detect_changes(self.state, list(self.catalogs.values()),
                                 list(self.owned_lists.values()), self.results)
        self.state = changes.state
        self.results = changes.results
        return changes

    def match(self, progress_callback: Optional[ProgressCallback] = None) -> PassOutcome:
        """
        Run a pass over whatever needs matching and commit its results.

        Raises:
            RomTrackerError: another pass is already running
            MatchCancelledError: the pass was cancelled; nothing was committed
        """
        with self._lock:
            if self._matching:
                raise RomTrackerError("A match pass is already running")
            self._matching = True
        try:
            with self._lock:
                self._refresh()
                self._active_pass = MatchPass(
                    self.state,
                    list(self.catalogs.values()),
                    list(self.owned_lists.values()),
                    self.results,
                    chunk_size=self.chunk_size,
                    max_workers=self.max_workers,
                )
            for event in self._active_pass:
                if progress_callback:
                    progress_callback(event)
            outcome = self._active_pass.outcome
            with self._lock:
                self.state = outcome.state
                self.results = outcome.results
                self._refresh()
                self.last_outcome = outcome
            return outcome
        finally:
            with self._lock:
                self._active_pass = None
                self._matching = False

    def cancel(self) -> bool:
        """Cancel the running pass, if any. Its results are discarded."""
        active = self._active_pass
        if active is None:
            return False
        active.cancel()
        return True

    def full_rematch(self) -> None:
        with self._lock:
            self._ensure_idle()
            self.state, self.results = full_rematch(self.state, self.results)

    def rematch_platform(self, platform: str) -> None:
        with self._lock:
            self._ensure_idle()
            self.state, self.results = rematch_platform(self.state, self.results, platform)

    def results_for(self, platform: str) -> List[MatchResult]:
        return [r for r in self.results if r.platform_name == platform]

    def to_snapshot(self) -> Dict:
        """State, results and working set as plain JSON-ready values."""
        with self._lock:
            return {
                'state': self.state.to_dict(),
                'results': [r.to_dict() for r in self.results],
                'catalogs': [c.to_dict() for c in self.catalogs.values()],
                'owned_lists': [o.to_dict() for o in self.owned_lists.values()],
            }

    @classmethod
    def restore(cls, snapshot: Dict, chunk_size: int = DEFAULT_CHUNK_SIZE,
                max_workers: int = 1) -> 'MatchOrchestrator':
        """Rebuild an orchestrator from ``to_snapshot()`` output."""
        orchestrator = cls(
            chunk_size=chunk_size,
            max_workers=max_workers,
            state=MatchRunState.from_dict(snapshot.get('state', {})),
            results=[MatchResult.from_dict(r) for r in snapshot.get('results', [])],
        )
        for raw in snapshot.get('catalogs', []):
            catalog = ParsedCatalog.from_dict(raw)
            orchestrator.catalogs[catalog.platform_name] = catalog
        for raw in snapshot.get('owned_lists', []):
            owned = OwnedList.from_dict(raw)
            orchestrator.owned_lists[owned.platform_name] = owned
        return orchestrator
