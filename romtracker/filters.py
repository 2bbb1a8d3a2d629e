"""
Result filtering, facet listing and collection statistics.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from .classifier import has_revision_tag, is_official_release
from .models import MatchResult
from .regions import sanitize_region

STATUS_CHOICES = ('all', 'have', 'missing', 'missing-alt', 'missing-all')
RELEASE_TYPE_CHOICES = ('all', 'official', 'unofficial')
REVISION_CHOICES = ('all', 'base', 'revisions')


def display_region(result: MatchResult) -> str:
    """Sanitized region, falling back to the raw catalog string."""
    region = result.entry.region
    return sanitize_region(region) or region or ''


@dataclass
class ResultFilter:
    """Criteria for narrowing a result list; defaults keep everything"""
    platform: Optional[str] = None
    search: str = ''
    regions: FrozenSet[str] = field(default_factory=frozenset)
    status: str = 'all'
    category: Optional[str] = None
    release_type: str = 'all'
    revision: str = 'all'

    def __post_init__(self):
        if self.status not in STATUS_CHOICES:
            raise ValueError(f"Unknown status filter: {self.status}")
        if self.release_type not in RELEASE_TYPE_CHOICES:
            raise ValueError(f"Unknown release type filter: {self.release_type}")
        if self.revision not in REVISION_CHOICES:
            raise ValueError(f"Unknown revision filter: {self.revision}")
        self.regions = frozenset(self.regions or ())

    @classmethod
    def from_dict(cls, d: Dict) -> 'ResultFilter':
        category = d.get('category')
        platform = d.get('platform')
        return cls(
            platform=None if platform in (None, '', 'all') else platform,
            search=d.get('search') or '',
            regions=frozenset(d.get('regions') or ()),
            status=d.get('status') or 'all',
            category=None if category in (None, '', 'all') else category,
            release_type=d.get('release_type') or 'all',
            revision=d.get('revision') or 'all',
        )

    def accepts(self, result: MatchResult) -> bool:
        entry = result.entry

        if self.platform and result.platform_name != self.platform:
            return False

        if self.search:
            query = self.search.lower()
            if (query not in entry.reference_name.lower()
                    and query not in (entry.description or '').lower()):
                return False

        if self.regions and display_region(result) not in self.regions:
            return False

        if not self._status_accepts(result):
            return False

        if self.category and entry.category.value != self.category:
            return False

        title = entry.reference_name or entry.description
        if self.release_type != 'all':
            official = is_official_release(title)
            if official != (self.release_type == 'official'):
                return False

        if self.revision != 'all':
            revised = has_revision_tag(title, entry)
            if revised != (self.revision == 'revisions'):
                return False

        return True

    def _status_accepts(self, result: MatchResult) -> bool:
        if self.status == 'all':
            return True
        if self.status == 'have':
            return result.owned
        if result.owned:
            return False
        alt_owned = any(a.owned for a in result.alternate_regions or ())
        if self.status == 'missing-alt':
            return alt_owned
        if self.status == 'missing-all':
            return not alt_owned
        return True


def filter_results(results: Iterable[MatchResult],
                   criteria: Optional[ResultFilter] = None) -> List[MatchResult]:
    criteria = criteria or ResultFilter()
    return [r for r in results if criteria.accepts(r)]


def collection_stats(results: Iterable[MatchResult]) -> Dict:
    """Totals over a (usually already filtered) result list."""
    results = list(results)
    total = len(results)
    have = sum(1 for r in results if r.owned)
    percentage = round(have / total * 100, 1) if total else 0.0
    return {
        'total': total,
        'have': have,
        'missing': total - have,
        'percentage': percentage,
    }


def facets(results: Iterable[MatchResult]) -> Dict[str, List[str]]:
    """Distinct platforms, regions and categories present in the results"""
    platforms, regions, categories = set(), set(), set()
    for r in results:
        platforms.add(r.platform_name)
        region = display_region(r)
        if region:
            regions.add(region)
        categories.add(r.entry.category.value)
    return {
        'platforms': sorted(platforms),
        'regions': sorted(regions),
        'categories': sorted(categories),
    }


def missing_names(results: Iterable[MatchResult]) -> List[str]:
    """Media file name (or reference name) of every unowned result."""
    return [r.entry.match_name for r in results if not r.owned]
