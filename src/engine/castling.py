"""Fixed squares of the four castling moves. Shared by move generation, the legality filter and the board."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from src.engine.pieces import Color
from src.engine.square import Square


class CastleSide(Enum):
    """Values are the notation used when the move gets recorded."""

    KING_SIDE = "O-O"
    QUEEN_SIDE = "O-O-O"


def squares_between_on_row(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares strictly in between the two squares specified that are on the same row

    Needed for checking if you can still castle (nothing may stand between king and rook)
    """
    if from_square.row != to_square.row:
        raise ValueError(
            f"squares_between_on_row requires both squares to lie on the same row. \n from: {from_square}\n to:{to_square}"
        )
    step = 1 if to_square.col > from_square.col else -1
    return [
        Square(from_square.row, col)
        for col in range(from_square.col + step, to_square.col, step)
    ]


@dataclass(frozen=True)
class CastlingSquares:
    """
    Where king and rook start and land when castling to one side.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """ex. `CastlingSquares.from_algebraic("e1", "g1", "h1", "f1")`"""
        return cls(*(Square.from_algebraic(name) for name in (k_from, k_to, r_from, r_to)))

    def path(self) -> list[Square]:
        """Squares between king and rook. All of them must be empty."""
        return squares_between_on_row(self.king_from, self.rook_from)

    def king_path(self) -> list[Square]:
        """Start, pass-through and destination square of the king. None of them may be attacked."""
        passing = squares_between_on_row(self.king_from, self.king_to)
        return [self.king_from, *passing, self.king_to]


# Keyed by who castles and to which side. Squares never change in classical chess.
CASTLING_RULES: dict[tuple[Color, CastleSide], CastlingSquares] = {
    (Color.WHITE, CastleSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    (Color.WHITE, CastleSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    (Color.BLACK, CastleSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    (Color.BLACK, CastleSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castle_side_for(
    color: Color, from_square: Square, to_square: Square
) -> Optional[CastleSide]:
    """Which castling move (if any) a king move between these squares stands for."""
    for side in CastleSide:
        rule = CASTLING_RULES[(color, side)]
        if rule.king_from == from_square and rule.king_to == to_square:
            return side
    return None
