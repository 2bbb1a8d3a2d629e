"""
Fuzzy matcher - decides whether an owned file name and a catalog name
denote the same release.
"""

from typing import Callable, NamedTuple, Optional, Tuple

from .normalizer import compact, normalize

# Thresholds are a compatibility contract; keep them exact.
MIN_COMPACT_EQUAL = 3
MIN_PREFIX = 5
MIN_SUBSTRING = 7
MIN_TOKEN_LENGTH = 3
MIN_TOKENS = 2


class MatchRule(NamedTuple):
    name: str
    predicate: Callable[[str, str], bool]


def _ordered(a: str, b: str) -> Tuple[str, str]:
    """Return (shorter, longer); on a tie the second argument is the shorter."""
    if len(a) < len(b):
        return a, b
    return b, a


def normalized_equal(a: str, b: str) -> bool:
    return a == b


def space_insensitive_equal(a: str, b: str) -> bool:
    """'Dino City' vs 'DinoCity'"""
    ca, cb = compact(a), compact(b)
    return ca == cb and len(ca) >= MIN_COMPACT_EQUAL


def subtitle_prefix(a: str, b: str) -> bool:
    """'gunforce' vs 'gunforce battle fire engulfed terror island'"""
    shorter, longer = _ordered(a, b)
    return len(shorter) >= MIN_PREFIX and longer.startswith(shorter + ' ')


def compact_prefix(a: str, b: str) -> bool:
    shorter, longer = _ordered(compact(a), compact(b))
    return len(shorter) >= MIN_PREFIX and longer.startswith(shorter)


def substring(a: str, b: str) -> bool:
    shorter, longer = _ordered(a, b)
    return len(shorter) >= MIN_SUBSTRING and shorter in longer


def compact_substring(a: str, b: str) -> bool:
    shorter, longer = _ordered(compact(a), compact(b))
    return len(shorter) >= MIN_SUBSTRING and shorter in longer


def significant_tokens(normalized: str) -> frozenset:
    """Words long enough to carry meaning ('a', 'of', 'ii' are dropped)."""
    return frozenset(w for w in normalized.split(' ') if len(w) >= MIN_TOKEN_LENGTH)


def token_subset(a: str, b: str) -> bool:
    ta, tb = significant_tokens(a), significant_tokens(b)
    if len(ta) < MIN_TOKENS or len(tb) < MIN_TOKENS:
        return False
    return ta <= tb or tb <= ta


# Cheap checks first; the order is also the order reasons are reported in.
MATCH_RULES: Tuple[MatchRule, ...] = (
    MatchRule('normalized-equal', normalized_equal),
    MatchRule('space-insensitive-equal', space_insensitive_equal),
    MatchRule('subtitle-prefix', subtitle_prefix),
    MatchRule('compact-prefix', compact_prefix),
    MatchRule('substring', substring),
    MatchRule('compact-substring', compact_substring),
    MatchRule('token-subset', token_subset),
)


def normalized_reason(a: str, b: str) -> Optional[str]:
    """Name of the first rule accepting two already normalized names."""
    # Names that normalize to nothing ("[!].zip", "(USA).sfc") carry no title
    # and would otherwise all match each other.
    if not a or not b:
        return None
    for rule in MATCH_RULES:
        if rule.predicate(a, b):
            return rule.name
    return None


def matches_normalized(a: str, b: str) -> bool:
    return normalized_reason(a, b) is not None


def match_reason(owned_name: str, reference_name: str) -> Optional[str]:
    """
    Explain why an owned name matches a catalog name.

    Returns ``'identical'`` for equal raw strings, otherwise the name of the
    first rule in MATCH_RULES that holds, or None when nothing matches.
    """
    if owned_name == reference_name and owned_name:
        return 'identical'
    return normalized_reason(normalize(owned_name), normalize(reference_name))


def matches(owned_name: str, reference_name: str) -> bool:
    return match_reason(owned_name, reference_name) is not None
