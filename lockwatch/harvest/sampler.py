"""Random probe sampling over the repository listing.

GitHub's ``/repositories`` endpoint lists public repositories in id order
starting after a ``since`` offset. Drawing offsets at random from the 16-bit
space gives a spread of starting points without enumerating the listing, and
the seen set keeps a run from probing the same offset twice.
"""

from __future__ import annotations

import random
import typing as typ

ID_SPACE = 1 << 16

type SeenIds = set[int]


class _SupportsRandrange(typ.Protocol):
    def randrange(self, stop: int, /) -> int: ...


def next_unseen_id(seen: SeenIds, rng: _SupportsRandrange | None = None) -> int:
    """Draw an id in ``0..65535`` that is not in ``seen`` and record it.

    Rejected draws are retried without bound; the space is far larger than
    any realistic number of iterations in one run.

    Examples
    --------
    >>> seen = {0}
    >>> value = next_unseen_id(seen)
    >>> value != 0 and value in seen
    True

    """
    source = rng or random
    while True:
        candidate = source.randrange(ID_SPACE)
        if candidate not in seen:
            seen.add(candidate)
            return candidate

