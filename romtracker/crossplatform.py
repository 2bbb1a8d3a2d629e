"""
Cross-platform title grouping: which titles exist on several platforms
and on how many of them the user owns a copy.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import MatchResult

_BASE_TITLE_RES = [
    re.compile(r'\s*\([^)]*\)'),
    re.compile(r'\s*\[[^\]]*\]'),
    re.compile(r'\s*v?\d+\.\d+', re.IGNORECASE),
    re.compile(r'\s*Rev\s*\d+', re.IGNORECASE),
    re.compile(r'^The\s+', re.IGNORECASE),
]


def base_title(name: str) -> str:
    """'The Legend of Zelda (USA) (Rev 1)' -> 'Legend of Zelda'"""
    title = name or ''
    for pattern in _BASE_TITLE_RES:
        title = pattern.sub('', title)
    return title.strip()


@dataclass
class PlatformPresence:
    platform_name: str
    full_name: str
    owned: bool
    region: Optional[str] = None
    category: str = ''

    def to_dict(self) -> Dict:
        return {
            'platform_name': self.platform_name,
            'full_name': self.full_name,
            'owned': self.owned,
            'region': self.region,
            'category': self.category,
        }


@dataclass
class CrossPlatformTitle:
    title: str
    platforms: List[PlatformPresence] = field(default_factory=list)

    @property
    def total_platforms(self) -> int:
        return len(self.platforms)

    @property
    def owned_platforms(self) -> int:
        return sum(1 for p in self.platforms if p.owned)

    def to_dict(self) -> Dict:
        return {
            'title': self.title,
            'platforms': [p.to_dict() for p in self.platforms],
            'total_platforms': self.total_platforms,
            'owned_platforms': self.owned_platforms,
        }


def group_cross_platform(results: Iterable[MatchResult],
                         min_platforms: int = 2) -> List[CrossPlatformTitle]:
    """
    Group results by base title across platforms.

    Each platform contributes one presence per title, an owned version when
    there is one. Titles on fewer than ``min_platforms`` platforms are
    dropped. Sorted by platform count (descending) then title.
    """
    titles: Dict[str, str] = {}
    by_title: Dict[str, Dict[str, PlatformPresence]] = {}

    for result in results:
        title = base_title(result.entry.display_name)
        if not title:
            continue
        key = title.lower()
        titles.setdefault(key, title)
        per_platform = by_title.setdefault(key, {})
        current = per_platform.get(result.platform_name)
        if current is not None and (current.owned or not result.owned):
            continue
        per_platform[result.platform_name] = PlatformPresence(
            platform_name=result.platform_name,
            full_name=result.entry.display_name,
            owned=result.owned,
            region=result.entry.region,
            category=result.entry.category.value,
        )

    grouped = [
        CrossPlatformTitle(title=titles[key], platforms=list(per_platform.values()))
        for key, per_platform in by_title.items()
        if len(per_platform) >= min_platforms
    ]
    grouped.sort(key=lambda g: (-g.total_platforms, g.title.lower()))
    return grouped


def cross_platform_summary(grouped: List[CrossPlatformTitle]) -> Dict[str, int]:
    return {
        'titles': len(grouped),
        'fully_owned': sum(1 for g in grouped if g.owned_platforms == g.total_platforms),
        'partially_owned': sum(
            1 for g in grouped if 0 < g.owned_platforms < g.total_platforms
        ),
    }
