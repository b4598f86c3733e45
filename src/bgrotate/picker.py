# src/bgrotate/picker.py: Uniform random selection without replacement.

import random
from typing import List, Optional

from .util.errors import EmptyWorkspaceError

def pick(candidates: List[str], rng: Optional[random.Random] = None) -> str:
    """
    Remove and return one element of candidates, chosen uniformly at random.

    Raises:
        EmptyWorkspaceError: If candidates is empty.
    """
    if not candidates:
        raise EmptyWorkspaceError("Cannot pick from an empty pool.")
    index = (rng or random).randrange(len(candidates))
    # order within the pool carries no meaning, so swap-remove
    candidates[index], candidates[-1] = candidates[-1], candidates[index]
    return candidates.pop()
