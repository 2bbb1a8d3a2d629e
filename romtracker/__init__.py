"""
romtracker - track which releases of a ROM collection you own

Compares owned-file lists against XML DAT catalogs (No-Intro, Redump, MAME)
with fuzzy name matching, alternate-region reconciliation and incremental
re-matching.
"""

__version__ = '1.0.0'

from .models import (
    Category, MatchKind, CatalogEntry, ParsedCatalog, OwnedItem, OwnedList,
    AlternateRegion, MatchResult, MatchRunState, ProgressEvent,
)
from .errors import (
    RomTrackerError, CatalogParseError, EmptyCatalogError, MatchCancelledError,
)
from .parser import CatalogParser, parse_catalog, load_catalogs, parse_owned_list
from .normalizer import normalize
from .matcher import matches, match_reason
from .classifier import is_official_release, has_revision_tag
from .orchestrator import (
    MatchOrchestrator, MatchPass, detect_changes, full_rematch,
    rematch_platform, run_pass,
)
from .reporter import MissingReporter


__all__ = [
    'Category',
    'MatchKind',
    'CatalogEntry',
    'ParsedCatalog',
    'OwnedItem',
    'OwnedList',
    'AlternateRegion',
    'MatchResult',
    'MatchRunState',
    'ProgressEvent',
    'RomTrackerError',
    'CatalogParseError',
    'EmptyCatalogError',
    'MatchCancelledError',
    'CatalogParser',
    'parse_catalog',
    'load_catalogs',
    'parse_owned_list',
    'normalize',
    'matches',
    'match_reason',
    'is_official_release',
    'has_revision_tag',
    'MatchOrchestrator',
    'MatchPass',
    'detect_changes',
    'full_rematch',
    'rematch_platform',
    'run_pass',
    'MissingReporter',
]


def run_web(host='127.0.0.1', port=5000):
    """Run the web API"""
    from .web import run_server
    run_server(host, port)
