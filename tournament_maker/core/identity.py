import random
from typing import List, Optional, Sequence, TypeVar
from uuid import uuid4

T = TypeVar("T")


def new_id() -> str:
    return str(uuid4())


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly shuffled copy of `items`; the input is left untouched."""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def pick_index(length: int, rng: Optional[random.Random] = None) -> int:
    return (rng or random).randrange(length)
