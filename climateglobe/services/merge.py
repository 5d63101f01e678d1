from __future__ import annotations

from typing import Dict, Iterable, List, Protocol, TypeVar


class _Keyed(Protocol):
    id: str


K = TypeVar("K", bound=_Keyed)


def merge(*batches: Iterable[K]) -> List[K]:
    """
    Combine adapter outputs keyed by namespaced id.

    Contract:
      - same id: the later record replaces the earlier one (last writer wins)
      - different ids always coexist, even for the same real-world event seen
        by two sources; there is no cross-source identity resolution
      - order is first occurrence of each id
    """
    dedup: Dict[str, K] = {}
    for batch in batches:
        for it in batch:
            # dict keeps the first insertion position on overwrite
            dedup[it.id] = it
    return list(dedup.values())
