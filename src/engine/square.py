"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8: (rows, columns)
BOARD_DIMENSIONS = (8, 8)

FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"


@dataclass(frozen=True)
class Square:
    """
    Zero-based (row, col) coordinate.

    Row 0 is White's back rank, so row r is rank r + 1 and col c is file FILE_NAMES[c].
    The orientation is fixed for the whole engine and never flipped.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        col = ord(sq[0]) - ord("a")
        row = int(sq[1]) - 1
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{FILE_NAMES[self.col]}{RANK_NAMES[self.row]}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, d_row: int, d_col: int) -> Square:
        """The square reached by stepping along a vector. Might lie off the board."""
        return Square(self.row + d_row, self.col + d_col)


def is_algebraic_square(name: str) -> bool:
    """'e4' yes, 'e9', 'i1' or 'e' no"""
    return len(name) == 2 and name[0] in FILE_NAMES and name[1] in RANK_NAMES
