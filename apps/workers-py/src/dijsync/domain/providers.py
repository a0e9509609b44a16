"""Map a free-form ``--provider`` filter onto the portal's provider catalog."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence, Tuple

from .errors import ProviderNotFoundError

_SEPARATORS_RE = re.compile(r"[\s_\-]+")


def fold_name(text: str) -> str:
    """Casefold and collapse whitespace/``-``/``_`` runs into one space."""
    return _SEPARATORS_RE.sub(" ", (text or "").casefold()).strip()


# (candidate, raw input, trimmed casefolded input, separator-folded input) -> match?
Matcher = Callable[[str, str, str, str], bool]

MATCH_TIERS: Tuple[Tuple[str, Matcher], ...] = (
    ("exact", lambda candidate, raw, needle, folded: candidate == raw),
    (
        "case-insensitive",
        lambda candidate, raw, needle, folded: bool(needle) and candidate.casefold() == needle,
    ),
    (
        "substring",
        lambda candidate, raw, needle, folded: bool(folded) and folded in fold_name(candidate),
    ),
)


def resolve_provider(raw: str, providers: Sequence[str]) -> Optional[str]:
    """Return the canonical provider name for ``raw``, or None for "no filter".

    Tiers are tried strictly in order and, within a tier, in catalog order, so
    an exact name is never shadowed by a looser substring hit.
    """
    if not raw:
        return None
    needle = raw.strip().casefold()
    folded = fold_name(needle)
    for tier, matches in MATCH_TIERS:
        for candidate in providers:
            if matches(candidate, raw, needle, folded):
                logging.debug("Provider %r resolved to %r (%s match)", raw, candidate, tier)
                return candidate
    if not needle:
        return None
    raise ProviderNotFoundError(raw)
