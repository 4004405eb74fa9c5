"""Lookahead queue of upcoming tetrominoes."""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional
import random

from .tetromino import TetrominoType


class PieceQueue:
    """Fixed-length queue of upcoming piece kinds.

    Every :meth:`next` call is paired with a fresh draw appended to the tail, so
    ``len(queue)`` never changes.  Two draw policies are supported:

    ``"uniform"``
        Independent uniform draw with replacement.  Long runs of the same kind
        are possible.
    ``"bag"``
        Shuffled permutations of all seven kinds; each bag is exhausted before
        the next is shuffled.

    ``rng`` only needs ``choice`` and ``shuffle`` so tests can supply a fixed
    sequence.
    """

    def __init__(
        self,
        depth: int = 5,
        *,
        rng: Optional[random.Random] = None,
        randomizer: str = "uniform",
    ) -> None:
        if depth <= 0:
            raise ValueError("Queue depth must be positive")
        if randomizer not in ("uniform", "bag"):
            raise ValueError(f"Unknown randomizer: {randomizer}")
        self.depth = depth
        self.randomizer = randomizer
        self._rng = rng if rng is not None else random.Random()
        self._bag: List[TetrominoType] = []
        self._items: Deque[TetrominoType] = deque()
        self.refill()

    def __len__(self) -> int:
        return len(self._items)

    def _draw(self) -> TetrominoType:
        if self.randomizer == "uniform":
            return self._rng.choice(list(TetrominoType))
        if not self._bag:
            self._bag = list(TetrominoType)
            self._rng.shuffle(self._bag)
        return self._bag.pop()

    def refill(self) -> None:
        """Discard the upcoming pieces and draw a fresh lookahead."""

        self._bag = []
        self._items = deque(self._draw() for _ in range(self.depth))

    def next(self) -> TetrominoType:
        """Remove and return the head of the queue, topping the tail back up."""

        shape = self._items.popleft()
        self._items.append(self._draw())
        return shape

    def peek(self, depth: Optional[int] = None) -> List[TetrominoType]:
        """Return up to ``depth`` upcoming kinds without consuming them."""

        if depth is None:
            depth = self.depth
        return list(self._items)[: max(0, depth)]
