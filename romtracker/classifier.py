"""
Release classification: official/unofficial status, revision status and
parse-time categories.
"""

import re
from typing import Optional

from .models import CatalogEntry, Category

UNOFFICIAL_MARKERS = (
    '(proto', '(beta', '(demo', '(sample', '(pirate',
    '(unl)', '(unlicensed)', '(aftermarket)', '(homebrew)',
    '(hack)', '(bootleg)', '(alt)', '(test)',
    '[b]',  # bad dump
    '(pre-release)', '(preview)', '(promo)',
)

_REVISION_RES = [
    re.compile(r'\(rev\s*\d*[a-z]?\)', re.IGNORECASE),
    re.compile(r'\(v\d+(?:\.\d+)*\)', re.IGNORECASE),
    re.compile(r'\(version\s*\d+\)', re.IGNORECASE),
    re.compile(r'\(set\s*\d+\)', re.IGNORECASE),
    re.compile(r'\(alt\s*\d*\)', re.IGNORECASE),
    re.compile(r'\d{2}/\d{2}/\d{2}'),
    re.compile(r'\brevision\s+[a-z]\b', re.IGNORECASE),
]


def is_official_release(title: str) -> bool:
    """False when the title carries any unofficial-release marker."""
    lowered = (title or '').lower()
    return not any(marker in lowered for marker in UNOFFICIAL_MARKERS)


def has_revision_tag(title: str, entry: Optional[CatalogEntry] = None) -> bool:
    """True for arcade clones and for titles carrying a revision marker."""
    if entry is not None and entry.parent_reference:
        return True
    title = title or ''
    return any(pattern.search(title) for pattern in _REVISION_RES)


def categorize(description: str, reference_name: str, comment: str = '') -> Category:
    """
    Assign a release category from textual markers.

    Rules are checked in order and the first hit wins; titles often carry
    several signal words (a bootleg demo is Pirate/Hack).
    """
    desc = (description or '').lower()
    name = (reference_name or '').lower()
    comment = (comment or '').lower()

    if 'bootleg' in comment or 'bootleg' in desc:
        return Category.PIRATE_HACK
    if '(proto' in desc or 'proto' in name:
        return Category.PROTOTYPE
    if '(beta' in desc or 'beta' in name:
        return Category.BETA
    if '(demo' in desc or 'demo' in name:
        return Category.DEMO
    if '(sample' in desc or 'sample' in name:
        return Category.SAMPLE
    if ('(pirate' in desc or 'pirate' in name
            or '(hack' in desc or 'hack' in name
            or '(unl)' in desc or '(unl)' in name):
        return Category.PIRATE_HACK
    if '(homebrew)' in desc or 'homebrew' in name:
        return Category.HOMEBREW
    return Category.COMMERCIAL
