"""
Data models for ROM Tracker
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


CatalogFingerprint = Tuple[str, str, int]
OwnedListFingerprint = Tuple[str, int]


class Category(str, Enum):
    """Release category assigned when a catalog is parsed"""
    COMMERCIAL = 'Commercial'
    PROTOTYPE = 'Prototype'
    BETA = 'Beta'
    DEMO = 'Demo'
    SAMPLE = 'Sample'
    PIRATE_HACK = 'Pirate/Hack'
    HOMEBREW = 'Homebrew'


class MatchKind(str, Enum):
    EXACT = 'exact'
    FUZZY = 'fuzzy'


@dataclass(frozen=True)
class CatalogEntry:
    """One release record from a platform's catalog"""
    reference_name: str
    description: str = ""
    region: Optional[str] = None
    category: Category = Category.COMMERCIAL
    media_file_name: Optional[str] = None
    parent_reference: Optional[str] = None
    size: int = 0
    crc32: str = ""
    md5: str = ""
    sha1: str = ""
    comment: str = ""

    @property
    def match_name(self) -> str:
        """Primary key used when matching owned files"""
        return self.media_file_name or self.reference_name

    @property
    def display_name(self) -> str:
        return self.description or self.reference_name

    @property
    def is_parent(self) -> bool:
        return self.parent_reference is None

    def to_dict(self) -> Dict:
        return {
            'reference_name': self.reference_name,
            'description': self.description,
            'region': self.region,
            'category': self.category.value,
            'media_file_name': self.media_file_name,
            'parent_reference': self.parent_reference,
            'size': self.size,
            'crc32': self.crc32,
            'md5': self.md5,
            'sha1': self.sha1,
            'comment': self.comment,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'CatalogEntry':
        return cls(
            reference_name=d['reference_name'],
            description=d.get('description') or d['reference_name'],
            region=d.get('region'),
            category=Category(d.get('category', Category.COMMERCIAL.value)),
            media_file_name=d.get('media_file_name'),
            parent_reference=d.get('parent_reference'),
            size=d.get('size', 0),
            crc32=d.get('crc32', ''),
            md5=d.get('md5', ''),
            sha1=d.get('sha1', ''),
            comment=d.get('comment', ''),
        )


@dataclass
class ParsedCatalog:
    """A successfully parsed catalog document for one platform"""
    file_name: str
    platform_name: str
    entries: List[CatalogEntry] = field(default_factory=list)

    def fingerprint(self) -> CatalogFingerprint:
        return (self.file_name, self.platform_name, len(self.entries))

    def to_dict(self) -> Dict:
        return {
            'file_name': self.file_name,
            'platform_name': self.platform_name,
            'entries': [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'ParsedCatalog':
        return cls(
            file_name=d.get('file_name', ''),
            platform_name=d['platform_name'],
            entries=[CatalogEntry.from_dict(e) for e in d.get('entries', [])],
        )


@dataclass(frozen=True)
class OwnedItem:
    """A file name the user owns"""
    name: str

    def to_dict(self) -> Dict:
        return {'name': self.name}

    @classmethod
    def from_dict(cls, d: Dict) -> 'OwnedItem':
        return cls(name=d['name'])


@dataclass
class OwnedList:
    """Owned file names associated with one platform"""
    platform_name: str
    items: List[OwnedItem] = field(default_factory=list)
    file_name: str = ""

    def fingerprint(self) -> OwnedListFingerprint:
        return (self.platform_name, len(self.items))

    def to_dict(self) -> Dict:
        return {
            'platform_name': self.platform_name,
            'file_name': self.file_name,
            'items': [i.name for i in self.items],
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'OwnedList':
        return cls(
            platform_name=d['platform_name'],
            items=[OwnedItem(name) for name in d.get('items', [])],
            file_name=d.get('file_name', ''),
        )


@dataclass
class AlternateRegion:
    """A same-title sibling released under another region"""
    region: str
    owned: bool = False

    def to_dict(self) -> Dict:
        return {'region': self.region, 'owned': self.owned}

    @classmethod
    def from_dict(cls, d: Dict) -> 'AlternateRegion':
        return cls(region=d['region'], owned=d.get('owned', False))


@dataclass
class MatchResult:
    """Ownership outcome for one catalog entry on one platform"""
    entry: CatalogEntry
    platform_name: str
    owned: bool = False
    matched_item: Optional[OwnedItem] = None
    match_kind: Optional[MatchKind] = None
    alternate_regions: Optional[List[AlternateRegion]] = None

    def __post_init__(self):
        if self.owned and (self.matched_item is None or self.match_kind is None):
            raise ValueError("Owned results need a matched item and a match kind")

    def to_dict(self) -> Dict:
        return {
            'entry': self.entry.to_dict(),
            'platform_name': self.platform_name,
            'owned': self.owned,
            'matched_item': self.matched_item.to_dict() if self.matched_item else None,
            'match_kind': self.match_kind.value if self.match_kind else None,
            'alternate_regions': (
                [a.to_dict() for a in self.alternate_regions]
                if self.alternate_regions is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'MatchResult':
        matched = None
        if d.get('matched_item'):
            matched = OwnedItem.from_dict(d['matched_item'])
        alternates = None
        if d.get('alternate_regions') is not None:
            alternates = [AlternateRegion.from_dict(a) for a in d['alternate_regions']]
        kind = d.get('match_kind')
        return cls(
            entry=CatalogEntry.from_dict(d['entry']),
            platform_name=d['platform_name'],
            owned=d.get('owned', False),
            matched_item=matched,
            match_kind=MatchKind(kind) if kind else None,
            alternate_regions=alternates,
        )


@dataclass
class MatchRunState:
    """Bookkeeping carried between incremental match passes"""
    catalog_fingerprints: Dict[str, CatalogFingerprint] = field(default_factory=dict)
    owned_fingerprints: Dict[str, OwnedListFingerprint] = field(default_factory=dict)
    pending: List[str] = field(default_factory=list)

    @property
    def is_baseline_empty(self) -> bool:
        return not self.catalog_fingerprints and not self.owned_fingerprints

    def copy(self) -> 'MatchRunState':
        return MatchRunState(
            catalog_fingerprints=dict(self.catalog_fingerprints),
            owned_fingerprints=dict(self.owned_fingerprints),
            pending=list(self.pending),
        )

    def to_dict(self) -> Dict:
        return {
            'catalog_fingerprints': {
                p: list(fp) for p, fp in self.catalog_fingerprints.items()
            },
            'owned_fingerprints': {
                p: list(fp) for p, fp in self.owned_fingerprints.items()
            },
            'pending': list(self.pending),
        }

    @classmethod
    def from_dict(cls, d: Dict) -> 'MatchRunState':
        return cls(
            catalog_fingerprints={
                p: (fp[0], fp[1], int(fp[2]))
                for p, fp in d.get('catalog_fingerprints', {}).items()
            },
            owned_fingerprints={
                p: (fp[0], int(fp[1]))
                for p, fp in d.get('owned_fingerprints', {}).items()
            },
            pending=list(d.get('pending', [])),
        )


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification emitted while a match pass runs"""
    current_index: int
    total_count: int
    platform_name: str

    def to_dict(self) -> Dict:
        return {
            'current_index': self.current_index,
            'total_count': self.total_count,
            'platform_name': self.platform_name,
        }
