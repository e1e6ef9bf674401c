from __future__ import annotations

import numpy as np

from .config import check_probability, check_side

# Cell states. int8 keeps a 1024x1024 lattice at 1 MiB.
EMPTY = np.int8(0)
OCCUPIED = np.int8(1)
BURNING = np.int8(2)
BURNT = np.int8(3)

CELL_DTYPE = np.int8


class Lattice:
    """
    Square N x N site lattice.

    The cell buffer (and the buffer of uniform draws behind it) is allocated
    once; ``populate`` overwrites every cell, so one instance can serve as the
    scratch lattice for a whole block of trials.
    """

    def __init__(self, side: int) -> None:
        self.side = check_side(side)
        shape = (self.side, self.side)
        try:
            self.cells = np.empty(shape, dtype=CELL_DTYPE)
            self._draws = np.empty(shape, dtype=np.float64)
            self._mask = np.empty(shape, dtype=bool)
        except ValueError as e:
            # numpy reports sizes past its index range as ValueError
            raise MemoryError(
                f"cannot allocate a {self.side}x{self.side} lattice"
            ) from e
        self.cells.fill(EMPTY)

    @classmethod
    def generate(cls, side: int, p: float, rng: np.random.Generator) -> "Lattice":
        """Fresh lattice with each cell occupied independently with probability p."""
        return cls(side).populate(p, rng)

    def populate(self, p: float, rng: np.random.Generator) -> "Lattice":
        p = check_probability(p)
        rng.random(out=self._draws)
        np.less(self._draws, p, out=self._mask)
        # OCCUPIED == True, EMPTY == False
        self.cells[...] = self._mask
        return self

    def count(self, state) -> int:
        return int(np.count_nonzero(self.cells == state))

    def occupied_count(self) -> int:
        return self.count(OCCUPIED)

    def copy(self) -> "Lattice":
        other = Lattice(self.side)
        other.cells[...] = self.cells
        return other

    @classmethod
    def from_cells(cls, cells) -> "Lattice":
        """Wrap an explicit square array of cell states (used for fixed layouts)."""
        arr = np.asarray(cells, dtype=CELL_DTYPE)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValueError(f"Expected a square 2-D array, got shape {arr.shape}")
        lattice = cls(arr.shape[0])
        lattice.cells[...] = arr
        return lattice

    def __repr__(self) -> str:
        return f"Lattice(side={self.side}, occupied={self.occupied_count()})"


def generate_lattice(side: int, p: float, rng: np.random.Generator) -> np.ndarray:
    """Raw cell array for one trial; see ``Lattice.generate``."""
    return Lattice.generate(side, p, rng).cells
