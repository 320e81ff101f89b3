"""
services/search_service.py – In-memory catalogue search.
"""

from typing import Sequence, Tuple

from models.pokemon import PokemonSummary


def search(entries: Sequence[PokemonSummary], query: str) -> Tuple[PokemonSummary, ...]:
    """
    Case-insensitive substring filter on name.

    Parameters
    ----------
    entries : Every summary loaded so far.
    query   : User-supplied search string, matched as typed (not trimmed).

    Returns
    -------
    Matching entries in their original order; all entries when query is
    empty/whitespace.  *entries* itself is never modified.
    """
    if not query.strip():
        return tuple(entries)
    q = query.casefold()
    return tuple(e for e in entries if q in e.name.casefold())
