"""
How pieces move and what they attack, looking at nothing but the board.

Every piece kind gets its own movement function and its own attack check (strategy pattern), looked up in
`MOVEMENT_RULES` and `ATTACK_RULES`. The result is pseudo-legal moves.

Legality (king safety, castling, en passant) is checked later in legality.py
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional, Protocol

from src.engine.castling import CastleSide
from src.engine.pieces import (
    PIECE_TO_FEN,
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceKind,
)
from src.engine.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Read access to the grid is all these functions use"""

    def piece(self, square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]

# (d_row, d_col)
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
KING_DELTAS: list[Vector] = [
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
]
STRAIGHTS: list[Vector] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIAGONALS: list[Vector] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]

# Rows where pawns start (double step allowed) and where they promote
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: BOARD_DIMENSIONS[0] - 2}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: BOARD_DIMENSIONS[0] - 1, Color.BLACK: 0}


@dataclass(frozen=True)
class Move:
    """
    A move is a value, not a reference into the board.

    It carries everything needed to apply or display it (the moving piece as it was before the move,
    what gets captured and where) so nobody needs to re-derive that from a board later.
    """

    from_square: Square
    to_square: Square
    piece: Piece
    captured: Optional[Piece] = None
    promotion: Optional[PieceKind] = None
    castle: Optional[CastleSide] = None
    is_en_passant: bool = False
    is_double_step: bool = False
    en_passant_captured_square: Optional[Square] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def matches(self, other: "Move") -> bool:
        """Same destination, same promotion choice, same castling flag (the origin is assumed equal)"""
        return (
            self.to_square == other.to_square
            and self.promotion == other.promotion
            and self.castle == other.castle
        )

    def to_uci(self) -> str:
        """Convert into UCI notation, ex. 'e2e4' or 'e7e8q'"""
        piece_char = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


def _create_move(square: Square, target_square: Square, board: Board) -> Move:
    """Snapshot the mover and whatever stands on the target square"""
    moving_piece = board.piece(square)
    assert moving_piece is not None
    return Move(
        from_square=square,
        to_square=target_square,
        piece=moving_piece,
        captured=board.piece(target_square),
    )


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting for sliding pieces
    -----

    Walk each direction square by square. Stop at the board edge, or at the first piece in the way
    (which is a capture when it belongs to the opponent).
    """
    moving_piece = board.piece(square)
    assert moving_piece is not None

    moves: list[Move] = []
    for d_row, d_col in directions:
        target_square = square.offset(d_row, d_col)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color != moving_piece.color:
                    moves.append(_create_move(square, target_square, board))
                break

            moves.append(_create_move(square, target_square, board))
            target_square = target_square.offset(d_row, d_col)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Kings and knights: one jump per delta, onto an empty square or an opposing piece"""
    moving_piece = board.piece(square)
    assert moving_piece is not None

    moves: list[Move] = []
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != moving_piece.color:
            moves.append(_create_move(square, target_square, board))

    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward onto an empty square.
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally (only when there is something to take)
    - reaching the final row: one move for every piece type it can promote into

    NOTE: En passant needs the game state and is added in legality.py
    """
    pawn = board.piece(square)
    assert pawn is not None
    forward = pawn.color.forward

    moves: list[Move] = []
    one_step = square.offset(forward, 0)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        moves.append(_create_move(square, one_step, board))

        two_steps = square.offset(2 * forward, 0)
        on_starting_row = square.row == PAWN_START_ROW[pawn.color]
        if (
            on_starting_row
            and not pawn.has_moved
            and two_steps.is_within_bounds()
            and board.piece(two_steps) is None
        ):
            double_step = _create_move(square, two_steps, board)
            moves.append(replace(double_step, is_double_step=True))

    # pawns take diagonally:
    for d_col in (-1, 1):
        target_square = square.offset(forward, d_col)
        if not target_square.is_within_bounds():
            continue
        piece_found = board.piece(target_square)
        if piece_found is not None and piece_found.color != pawn.color:
            moves.append(_create_move(square, target_square, board))

    promotion_row = PROMOTION_ROW[pawn.color]
    expanded: list[Move] = []
    for move in moves:
        if move.to_square.row == promotion_row:
            expanded.extend(pawn_moves_w_promotion(move))
        else:
            expanded.append(move)
    return expanded


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks slide along ranks and files"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """Rook + bishop"""
    return raycasting_move(square, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    One square in any direction.

    The two-file castling jump is added in legality.py, it depends on more than the squares around the king.
    """
    return single_step_move(square, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceKind, CandidateMovesFn] = {
    PieceKind.PAWN: candidate_pawn_moves,
    PieceKind.KNIGHT: candidate_knight_moves,
    PieceKind.BISHOP: candidate_bishop_moves,
    PieceKind.ROOK: candidate_rook_moves,
    PieceKind.QUEEN: candidate_queen_moves,
    PieceKind.KING: candidate_king_moves,
}


def generate_piece_moves(board: Board, from_square: Square) -> list[Move]:
    """Every geometrically valid move of the piece on `from_square`, ignoring the safety of its own king"""
    if not from_square.is_within_bounds():
        return []
    piece = board.piece(from_square)
    if piece is None:
        return []
    movement_rule = MOVEMENT_RULES[piece.kind]
    return movement_rule(from_square, board)


# --- ATTACK ORACLE ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_kinds: frozenset[PieceKind],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting, but looking outward from the attacked square.
    ---

    Returns TRUE if the first piece encountered along a direction has the color and one of the kinds specified.
    """
    for d_row, d_col in directions:
        target_square = square.offset(d_row, d_col)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.kind in by_kinds:
                    return True
                break
            target_square = target_square.offset(d_row, d_col)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_kind: PieceKind,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Attack check for pieces that only jump a single step (pawns, knights, kings).

    Returns TRUE if a piece of the specified color and kind stands one step away.
    """
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.kind == by_kind
        ):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn could take on your square -->
    Must look one row DOWN the board (white pawns move UP the board).

    Hence, vectors are exactly opposite to the ones used in `candidate_pawn_moves()`
    """
    backward = -by_color.forward
    inverse_pawn_take_deltas: list[Vector] = [(backward, -1), (backward, 1)]
    return single_step_attack(
        square, by_color, PieceKind.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceKind.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_along_diagonal(square: Square, by_color: Color, board: Board) -> bool:
    """Bishops and queens"""
    diagonal_sliders = frozenset({PieceKind.BISHOP, PieceKind.QUEEN})
    return raycasting_attack(square, by_color, diagonal_sliders, board, DIAGONALS)


def is_attacked_along_straight(square: Square, by_color: Color, board: Board) -> bool:
    """Rooks and queens"""
    straight_sliders = frozenset({PieceKind.ROOK, PieceKind.QUEEN})
    return raycasting_attack(square, by_color, straight_sliders, board, STRAIGHTS)


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceKind.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[str, IsAttackedFn] = {
    "pawn": is_attacked_by_pawn,
    "knight": is_attacked_by_knight,
    "diagonal": is_attacked_along_diagonal,
    "straight": is_attacked_along_straight,
    "king": is_attacked_by_king,
}


def is_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """Attack oracle: does any piece of `by_color` threaten `square`? Does not care whose turn it is."""
    return any(rule(square, by_color, board) for rule in ATTACK_RULES.values())


# -- PAWN PROMOTION MOVES --
def pawn_moves_w_promotion(pawn_move: Move) -> list[Move]:
    """Return multiple copies of the pawn move with the piece type to promote into filled in."""
    return [replace(pawn_move, promotion=kind) for kind in PROMOTION_OPTIONS]
