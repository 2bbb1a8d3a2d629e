"""
Region reconciliation: alternate-region siblings and region sanitization.
"""

import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import AlternateRegion, CatalogEntry, OwnedItem
from .normalizer import grouping_title, normalize


class OwnedIndex:
    """Lookup tables over one platform's owned list"""

    def __init__(self, items: Sequence[OwnedItem]):
        self.items = list(items)
        self.by_name: Dict[str, OwnedItem] = {}
        self.by_normalized: Dict[str, OwnedItem] = {}
        self.normalized: List[Tuple[OwnedItem, str]] = []
        for item in self.items:
            norm = normalize(item.name)
            self.by_name.setdefault(item.name, item)
            if norm:
                self.by_normalized.setdefault(norm, item)
            self.normalized.append((item, norm))

    def __len__(self) -> int:
        return len(self.items)

    def owns_exactly(self, entry: CatalogEntry) -> bool:
        """Exact file name first, then plain normalized equality."""
        name = entry.match_name
        if name in self.by_name:
            return True
        norm = normalize(name)
        # an empty normalized name never stands in for ownership
        return bool(norm) and norm in self.by_normalized


class RegionIndex:
    """Entries of one platform grouped by their region-free title"""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self.groups: Dict[str, List[CatalogEntry]] = defaultdict(list)
        for entry in entries:
            self.groups[grouping_title(entry.display_name)].append(entry)

    def siblings(self, entry: CatalogEntry) -> List[CatalogEntry]:
        """Same-title entries with a different, non-empty raw region."""
        group = self.groups.get(grouping_title(entry.display_name), [])
        return [o for o in group if o.region and o.region != entry.region]


def find_alternate_regions(entry: CatalogEntry, region_index: RegionIndex,
                           owned_index: OwnedIndex) -> List[AlternateRegion]:
    """
    Alternate regional releases of ``entry`` and whether each is owned.

    Regions are compared as raw catalog strings; the first sibling seen for a
    region decides its ownership.
    """
    found: Dict[str, AlternateRegion] = {}
    for sibling in region_index.siblings(entry):
        if sibling.region in found:
            continue
        found[sibling.region] = AlternateRegion(
            region=sibling.region,
            owned=owned_index.owns_exactly(sibling),
        )
    return list(found.values())


# Tokens that show up inside catalog region fields without naming a region
_REGION_JUNK_RES = [
    re.compile(r'\b\d{2}/\d{2}/\d{2,4}\b'),
    re.compile(r'\b(?:rev(?:ision)?|ver(?:sion)?|v)\s*[\d.]+[a-z]?\b'),
    re.compile(r'\brev(?:ision)?\s+[a-z]\b'),
    re.compile(r'\bset\s*\d+\b'),
    re.compile(r'\b(?:disc|disk|side)\s*[\da-z]\b'),
    re.compile(r'\b\d+\s*(?:players?|p)\b'),
    re.compile(r'\b(?:sample|beta|demo|proto(?:type)?)\b'),
    re.compile(r'\b(?:capcom|konami|namco|sega|nintendo|taito|irem|data east|'
               r'snk|atari|midway|williams|bally|jaleco|tecmo|toaplan)\b'),
]

# Ordered; the first matching country wins
_COUNTRY_TABLE: List[Tuple[str, List[str]]] = [
    ('USA', [r'\busa?\b', r'\bunited\s+states\b', r'\bamerica\b']),
    ('Europe', [r'\beurope?\b', r'\beu\b', r'\beur\b']),
    ('Japan', [r'\bjapan(?:ese)?\b', r'\bjpn?\b']),
    ('World', [r'\bworld\b']),
    ('Asia', [r'\basian?\b']),
    ('Korea', [r'\bkorean?\b', r'\bkr\b']),
    ('China', [r'\bchina\b', r'\bchinese\b', r'\bcn\b']),
    ('Australia', [r'\baustralia\b', r'\bau\b']),
    ('Brazil', [r'\bbrazil\b', r'\bbr\b']),
    ('Canada', [r'\bcanada\b', r'\bca\b']),
    ('France', [r'\bfrance\b', r'\bfrench\b', r'\bfr\b']),
    ('Germany', [r'\bgermany\b', r'\bgerman\b', r'\bde\b']),
    ('Italy', [r'\bitaly\b', r'\bitalian\b', r'\bit\b']),
    ('Spain', [r'\bspain\b', r'\bspanish\b', r'\bes\b']),
    ('UK', [r'\buk\b', r'\bunited\s+kingdom\b', r'\bbritain\b', r'\bbritish\b']),
    ('Greece', [r'\bgreece\b', r'\bgreek\b', r'\bgr\b']),
    ('Scandinavia', [r'\bscandinavia\b']),
    ('Netherlands', [r'\bnetherlands\b', r'\bholland\b', r'\bdutch\b', r'\bnl\b']),
    ('Russia', [r'\brussia\b', r'\brussian\b', r'\bru\b']),
    ('Mexico', [r'\bmexico\b', r'\bmexican\b', r'\bmx\b']),
    ('Argentina', [r'\bargentina\b', r'\bar\b']),
    ('Sweden', [r'\bsweden\b', r'\bswedish\b', r'\bse\b']),
    ('Norway', [r'\bnorway\b', r'\bnorwegian\b', r'\bno\b']),
    ('Denmark', [r'\bdenmark\b', r'\bdanish\b', r'\bdk\b']),
    ('Finland', [r'\bfinland\b', r'\bfinnish\b', r'\bfi\b']),
    ('Belgium', [r'\bbelgium\b', r'\bbelgian\b', r'\bbe\b']),
    ('Switzerland', [r'\bswitzerland\b', r'\bswiss\b', r'\bch\b']),
    ('Austria', [r'\baustria\b', r'\baustrian\b', r'\bat\b']),
    ('Poland', [r'\bpoland\b', r'\bpolish\b', r'\bpl\b']),
    ('Portugal', [r'\bportugal\b', r'\bportuguese\b', r'\bpt\b']),
    ('Taiwan', [r'\btaiwan\b', r'\btaiwanese\b', r'\btw\b']),
    ('Hong Kong', [r'\bhong\s+kong\b', r'\bhk\b']),
    ('Singapore', [r'\bsingapore\b', r'\bsg\b']),
    ('Thailand', [r'\bthailand\b', r'\bthai\b', r'\bth\b']),
    ('India', [r'\bindia\b', r'\bindian\b', r'\bin\b']),
    ('Latin America', [r'\blatin\s+america\b']),
    ('South America', [r'\bsouth\s+america\b']),
    ('New Zealand', [r'\bnew\s+zealand\b', r'\bnz\b']),
    ('Ireland', [r'\bireland\b', r'\birish\b', r'\bie\b']),
    ('Czech Republic', [r'\bczech\b']),
    ('Hungary', [r'\bhungary\b', r'\bhungarian\b', r'\bhu\b']),
    ('Romania', [r'\bromania\b', r'\bromanian\b', r'\bro\b']),
    ('Turkey', [r'\bturkey\b', r'\bturkish\b', r'\btr\b']),
    ('South Africa', [r'\bsouth\s+africa\b', r'\bza\b']),
    ('Israel', [r'\bisrael\b', r'\bisraeli\b', r'\bil\b']),
    ('Saudi Arabia', [r'\bsaudi\s+arabia\b', r'\bsa\b']),
    ('UAE', [r'\buae\b', r'\bunited\s+arab\s+emirates\b']),
    ('Indonesia', [r'\bindonesia\b', r'\bindonesian\b', r'\bid\b']),
    ('Malaysia', [r'\bmalaysia\b', r'\bmalaysian\b', r'\bmy\b']),
    ('Philippines', [r'\bphilippines\b', r'\bfilipino\b', r'\bph\b']),
    ('Vietnam', [r'\bvietnam\b', r'\bvietnamese\b', r'\bvn\b']),
    ('Chile', [r'\bchile\b', r'\bchilean\b', r'\bcl\b']),
    ('Colombia', [r'\bcolombia\b', r'\bcolombian\b', r'\bco\b']),
    ('Peru', [r'\bperu\b', r'\bperuvian\b', r'\bpe\b']),
    ('Venezuela', [r'\bvenezuela\b', r'\bvenezuelan\b', r'\bve\b']),
]

_COUNTRY_RES = [
    (name, [re.compile(p) for p in patterns]) for name, patterns in _COUNTRY_TABLE
]


def sanitize_region(region: Optional[str]) -> Optional[str]:
    """
    Reduce a noisy catalog region field to a canonical country/region name.

    Returns None when nothing recognizable is left; callers decide whether to
    show the raw string instead.
    """
    if not region:
        return None
    text = region.strip().lower()
    for pattern in _REGION_JUNK_RES:
        text = pattern.sub(' ', text)
    text = re.sub(r'\s+', ' ', text).strip()
    if not text:
        return None
    for name, patterns in _COUNTRY_RES:
        if any(p.search(text) for p in patterns):
            return name
    return None
