"""Public invoice/schedule tokens.

A token is the first 8 hex characters of SHA-256 over the decimal family id.
It only obscures sequential ids in shareable links; it is not a secret.
"""

import hashlib
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 8


def hash_for_family(family_id: int) -> str:
    """Public token for a family id."""
    digest = hashlib.sha256(str(family_id).encode("utf-8")).hexdigest()
    return digest[:TOKEN_LENGTH]


def resolve(token: str | None, known_family_ids: Iterable[int]) -> int | None:
    """
    Find the family id for a token by hashing every known id.

    Returns the first match in iteration order, or None.
    """
    if not token or len(token) != TOKEN_LENGTH:
        return None
    for family_id in known_family_ids:
        if hash_for_family(family_id) == token:
            return family_id
    return None


class FamilyTokenIndex:
    """
    Reverse map token -> family id.

    Same answers as ``resolve`` over the same ids (first id wins on a token
    collision), without hashing every family on each lookup. ``sync`` rebuilds
    the map only when the id sequence changed.
    """

    def __init__(self, family_ids: Iterable[int] = ()) -> None:
        self._family_ids: tuple[int, ...] = ()
        self._by_token: dict[str, int] = {}
        self.sync(family_ids)

    def __len__(self) -> int:
        return len(self._family_ids)

    def sync(self, family_ids: Iterable[int]) -> bool:
        """Rebuild for a new id set. Returns True when a rebuild happened."""
        ids = tuple(family_ids)
        if ids == self._family_ids:
            return False
        by_token: dict[str, int] = {}
        for family_id in ids:
            token = hash_for_family(family_id)
            if token in by_token and by_token[token] != family_id:
                logger.warning(
                    "Token %s shared by families %s and %s; first one wins",
                    token,
                    by_token[token],
                    family_id,
                )
                continue
            by_token[token] = family_id
        self._family_ids = ids
        self._by_token = by_token
        return True

    def resolve(self, token: str | None) -> int | None:
        if not token or len(token) != TOKEN_LENGTH:
            return None
        return self._by_token.get(token)


# Shared across requests; resynced from the active family ids on each lookup
token_index = FamilyTokenIndex()
