"""
Title and file name normalization used before any comparison.
"""

import re

KNOWN_EXTENSIONS = (
    'sfc', 'snes', 'nes', 'gb', 'gbc', 'gba', 'gd3', 'gd7', 'dx2', 'mgd',
    'md', 'smd', 'gen', '32x', 'sms', 'gg', 'sg', 'n64', 'z64', 'v64',
    'nds', '3ds', 'cia', 'iso', 'cue', 'bin', 'img', 'mdf', 'cdi', 'chd',
    'zip', '7z', 'rar', 'gz',
)

_EXTENSION_RE = re.compile(r'\.(?:%s)$' % '|'.join(KNOWN_EXTENSIONS), re.IGNORECASE)

# Known tags, removed before the generic bracket sweep
_KNOWN_TAG_RES = [
    re.compile(r'\s*\(rev\s*\d*[a-z]?\)', re.IGNORECASE),
    re.compile(r'\s*\(v\d+(?:\.\d+)*\)', re.IGNORECASE),
    re.compile(r'\s*\(version\s*\d+\)', re.IGNORECASE),
    re.compile(r'\s*\((?:usa|europe|japan|world)\)', re.IGNORECASE),
    re.compile(r'\s*\((?:en,fr,de,es,it|en,fr,de|en,fr|en|ja)\)', re.IGNORECASE),
]

_PAREN_RE = re.compile(r'\s*\([^)]*\)')
_BRACKET_RE = re.compile(r'\s*\[[^\]]*\]')

_CONNECTORS = [
    (re.compile(r'\s*&\s*'), ' and '),
    (re.compile(r'\s*\+\s*'), ' plus '),
    (re.compile(r'\s*-\s*'), ' '),
    (re.compile(r'\s+vs\.?\s+', re.IGNORECASE), ' vs '),
]

_NON_ALNUM_RE = re.compile(r'[^a-z0-9\s]')
_WHITESPACE_RE = re.compile(r'\s+')

_GROUP_PAREN_RE = re.compile(r'\s*\([^)]*\)\s*')
_GROUP_BRACKET_RE = re.compile(r'\s*\[[^\]]*\]\s*')


def strip_extension(name: str) -> str:
    """Remove a trailing ROM/archive extension, if it is a known one."""
    return _EXTENSION_RE.sub('', name)


def normalize(text: str) -> str:
    """
    Reduce a title or file name to a canonical comparable form.

    Lowercases, drops known extensions, region/revision/language tags and any
    other bracketed content, spells out connectors and strips punctuation.
    The result only holds ``[a-z0-9]`` words separated by single spaces, so
    ``normalize(normalize(x)) == normalize(x)``.
    """
    if not text:
        return ''
    name = text.lower()
    name = strip_extension(name)
    for pattern in _KNOWN_TAG_RES:
        name = pattern.sub('', name)
    name = _PAREN_RE.sub('', name)
    name = _BRACKET_RE.sub('', name)
    for pattern, replacement in _CONNECTORS:
        name = pattern.sub(replacement, name)
    name = _NON_ALNUM_RE.sub('', name)
    return _WHITESPACE_RE.sub(' ', name).strip()


def compact(normalized: str) -> str:
    """Space-free form of an already normalized name."""
    return normalized.replace(' ', '')


def grouping_title(text: str) -> str:
    """
    Looser reduction used to group regional releases of one title.

    Only parenthetical and bracketed decorations are removed; extensions and
    punctuation are left alone.
    """
    if not text:
        return ''
    name = _GROUP_PAREN_RE.sub(' ', text)
    name = _GROUP_BRACKET_RE.sub(' ', name)
    return _WHITESPACE_RE.sub(' ', name).strip().lower()
