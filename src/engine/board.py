"""
The 8x8 grid of pieces.

A `Board` never changes: placing, removing or moving pieces hands back a new one (copy-on-write).
Also reads and writes the piece placement field of FEN.
"""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.exceptions import InvalidPositionError
from src.engine.castling import CASTLING_RULES
from src.engine.moves import Move, is_attacked
from src.engine.pieces import FEN_TO_PIECE, Color, Piece, PieceKind
from src.engine.square import BOARD_DIMENSIONS, Square

Grid = tuple[tuple[Optional[Piece], ...], ...]


_PLACEMENT_PIECES = frozenset(FEN_TO_PIECE) | {letter.upper() for letter in FEN_TO_PIECE}
_EMPTY_RUNS = frozenset(str(count) for count in range(1, BOARD_DIMENSIONS[1] + 1))


def _row_width(row_fen: str) -> Optional[int]:
    """Squares covered by one row of a placement string. None when it holds anything but piece letters or 1-8."""
    width = 0
    for character in row_fen:
        if character in _EMPTY_RUNS:
            width += int(character)
        elif character in _PLACEMENT_PIECES:
            width += 1
        else:
            return None
    return width


def is_valid_placement(placement: str) -> bool:
    """Rows separated by slashes, rank 8 first, each row exactly as wide as the board"""
    num_rows, num_cols = BOARD_DIMENSIONS
    row_fens = placement.split("/")
    return len(row_fens) == num_rows and all(
        _row_width(row_fen) == num_cols for row_fen in row_fens
    )


@dataclass(frozen=True)
class Board:
    """
    Immutable 8x8 grid: grid[row][col] holds a Piece or None.

    Every change returns a new Board. A board is never modified after creation, so states never share a
    board that could change under them.
    """

    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        num_rows, num_cols = BOARD_DIMENSIONS
        return cls(tuple(tuple(None for _ in range(num_cols)) for _ in range(num_rows)))

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the first part of a FEN string (the piece placement).

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 7), starting with a rook on a8
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 0) are the white pieces.

        Every piece starts out as not having moved.
        """
        if not is_valid_placement(fen_str):
            raise InvalidPositionError(
                f"Cannot interpret supplied string as a piece placement: {fen_str!r}"
            )

        num_rows, _ = BOARD_DIMENSIONS
        rows: list[list[Optional[Piece]]] = []
        # FEN string is read from top rank (8th) to bottom rank (1st)
        for fen_one_row in reversed(fen_str.split("/")):
            row: list[Optional[Piece]] = []
            for character in fen_one_row:
                if character.isalpha():
                    row.append(Piece.from_fen(character))
                else:
                    # A number denotes the amount of empty squares after each other
                    row.extend([None] * int(character))
            rows.append(row)
        assert len(rows) == num_rows
        return cls(tuple(tuple(row) for row in rows))

    def to_fen(self) -> str:
        """Rows are separated by slashes, top rank first."""
        return "/".join(
            self._row_to_fen(row) for row in range(BOARD_DIMENSIONS[0] - 1, -1, -1)
        )

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single row"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in self.grid[row]:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire row is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def piece(self, square: Square) -> Optional[Piece]:
        """Squares off the board read as empty"""
        if not square.is_within_bounds():
            return None
        return self.grid[square.row][square.col]

    def with_pieces(self, changes: dict[Square, Optional[Piece]]) -> Self:
        """Copy-on-write: a new board with the given squares overwritten (None empties a square)"""
        rows = [list(row) for row in self.grid]
        for square, piece in changes.items():
            if not square.is_within_bounds():
                raise ValueError(f"Square {square} is not on the board")
            rows[square.row][square.col] = piece
        return type(self)(tuple(tuple(row) for row in rows))

    def place_piece(self, piece: Piece, square: Square) -> Self:
        return self.with_pieces({square: piece})

    def remove_piece(self, square: Square) -> Self:
        return self.with_pieces({square: None})

    def squares(self) -> list[Square]:
        """All squares, row by row"""
        num_rows, num_cols = BOARD_DIMENSIONS
        return [Square(row, col) for row in range(num_rows) for col in range(num_cols)]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square
            for square in self.squares()
            if (piece := self.piece(square)) is not None and piece.color == color
        ]

    def locate_pieces(self, kind: PieceKind, color: Color) -> list[Square]:
        return [
            square
            for square in self.locate_color(color)
            if (piece := self.piece(square)) is not None and piece.kind == kind
        ]

    def find_king(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceKind.KING, color)
        return kings[0] if kings else None

    def is_attacked(self, square: Square, by_color: Color) -> bool:
        return is_attacked(self, square, by_color)

    def is_any_attacked(self, squares: list[Square], by_color: Color) -> bool:
        return any(self.is_attacked(square, by_color) for square in squares)

    def is_any_occupied(self, squares: list[Square]) -> bool:
        return any(self.piece(square) is not None for square in squares)

    def is_check(self, color: Color) -> bool:
        """Is the king of `color` under attack? (A board without that king is never in check.)"""
        king_square = self.find_king(color)
        if king_square is None:
            return False
        return self.is_attacked(king_square, color.opponent)

    def apply_move(self, move: Move) -> Self:
        """
        Returns the board after the move. The move is assumed to be legal: nothing gets validated here.
        ---

        1. lift the moving piece
        2. en passant: also remove the pawn taken (it is NOT standing on the target square)
        3. castling: also bring the rook over to the other side of the king
        4. place the moving piece (promoted if needed) on its target square
        """
        changes: dict[Square, Optional[Piece]] = {move.from_square: None}

        if move.is_en_passant and move.en_passant_captured_square is not None:
            changes[move.en_passant_captured_square] = None

        if move.castle is not None:
            rule = CASTLING_RULES[(move.piece.color, move.castle)]
            rook = self.piece(rule.rook_from)
            assert rook is not None
            changes[rule.rook_from] = None
            changes[rule.rook_to] = rook.moved()

        placed = move.piece.moved()
        if move.promotion is not None:
            placed = placed.promote_to(move.promotion)
        changes[move.to_square] = placed

        return self.with_pieces(changes)


def apply_move(board: Board, move: Move) -> Board:
    """Same as `board.apply_move(move)`, for callers that prefer plain functions"""
    return board.apply_move(move)
