"""
From candidate moves to legal moves.
----

The movement rules in moves.py only know about geometry. Here we add what needs more context:

* en passant (needs the en passant target of the game state)
* castling (needs the rook / has-moved flags and which squares the opponent attacks)
* king safety: every candidate is played on a scratch board, and dropped if it leaves your own king attacked.
  This single check also takes care of pins, discovered checks and 'cannot capture into check'.
"""

from dataclasses import replace
from typing import Optional

from src.engine.board import Board
from src.engine.castling import CASTLING_RULES, CastleSide, castle_side_for
from src.engine.moves import Move, generate_piece_moves
from src.engine.pieces import Color, PieceKind
from src.engine.square import Square


# -- CANDIDATE MOVES ---
def castling_candidates(board: Board, square: Square) -> list[Move]:
    """
    Add the king's two-file jumps as candidates when the squares it lands on / passes are empty.
    Whether castling is really allowed is decided by `filter_legal()`.
    """
    king = board.piece(square)
    if king is None or king.kind != PieceKind.KING or king.has_moved:
        return []

    moves: list[Move] = []
    for side in CastleSide:
        rule = CASTLING_RULES[(king.color, side)]
        if rule.king_from != square:
            continue
        if board.is_any_occupied(rule.path()):
            continue
        moves.append(Move(from_square=square, to_square=rule.king_to, piece=king))
    return moves


def en_passant_moves(
    board: Board, square: Square, en_passant_square: Optional[Square]
) -> list[Move]:
    """
    A pawn standing diagonally behind the en passant square may move onto it.

    NOTE: The en passant square is empty, so `candidate_pawn_moves()` never offers this diagonal step itself.
    """
    pawn = board.piece(square)
    if en_passant_square is None or pawn is None or pawn.kind != PieceKind.PAWN:
        return []

    on_diagonal = any(
        square.offset(pawn.color.forward, d_col) == en_passant_square for d_col in (-1, 1)
    )
    if not on_diagonal or board.piece(en_passant_square) is not None:
        return []
    return [Move(from_square=square, to_square=en_passant_square, piece=pawn)]


def candidate_moves(
    board: Board, square: Square, en_passant_target: Optional[Square]
) -> list[Move]:
    """Pseudo-legal moves of the piece on `square` + its castling / en passant candidates"""
    moves = generate_piece_moves(board, square)
    moves.extend(castling_candidates(board, square))
    moves.extend(en_passant_moves(board, square, en_passant_target))
    return moves


# -- LEGALITY FILTER ---
def _tag_en_passant(
    board: Board, move: Move, en_passant_target: Optional[Square]
) -> Optional[Move]:
    """
    Upgrade a diagonal pawn step onto the en passant target into an en passant capture.

    The pawn taken stands on the file of the target square, on the row the capturing pawn started from.
    Returns None if that pawn is not there (the candidate must then be dropped).
    Other moves pass through unchanged.
    """
    is_diagonal_pawn_step = (
        move.piece.kind == PieceKind.PAWN
        and move.to_square == en_passant_target
        and move.to_square.col != move.from_square.col
    )
    if not is_diagonal_pawn_step:
        return move

    captured_square = Square(move.from_square.row, move.to_square.col)
    captured = board.piece(captured_square)
    if (
        captured is None
        or captured.kind != PieceKind.PAWN
        or captured.color == move.piece.color
    ):
        return None
    return replace(
        move,
        captured=captured,
        is_en_passant=True,
        en_passant_captured_square=captured_square,
    )


def _is_king_jump(move: Move) -> bool:
    return (
        move.piece.kind == PieceKind.KING
        and move.to_square.row == move.from_square.row
        and abs(move.to_square.col - move.from_square.col) == 2
    )


def _tag_castling(move: Move) -> Move:
    """An unmoved king jumping two files is castling"""
    if not _is_king_jump(move) or move.piece.has_moved:
        return move
    side = castle_side_for(move.piece.color, move.from_square, move.to_square)
    return replace(move, castle=side)


def _is_castling_allowed(board: Board, move: Move, color: Color) -> bool:
    """
    **you are allowed to castle if**

    * the rook in that corner is still there, is yours, and never moved
    * every square between king and rook is empty
    * the king does not start on, pass through, or land on an attacked square (so: no castling out of check)
    """
    assert move.castle is not None
    rule = CASTLING_RULES[(color, move.castle)]
    rook = board.piece(rule.rook_from)
    if (
        rook is None
        or rook.kind != PieceKind.ROOK
        or rook.color != color
        or rook.has_moved
    ):
        return False

    if board.is_any_occupied(rule.path()):
        return False

    return not board.is_any_attacked(rule.king_path(), color.opponent)


def _is_putting_yourself_in_check(board: Board, move: Move, color: Color) -> bool:
    """
    plan:
    1. make the candidate move on a scratch board (boards are immutable: the original is untouched)
    2. determine if your king is attacked on the new board

    A board without your king counts as unsafe.
    """
    scratch_board = board.apply_move(move)
    if scratch_board.find_king(color) is None:
        return True
    return scratch_board.is_check(color)


def filter_legal(
    board: Board,
    candidates: list[Move],
    color: Color,
    en_passant_target: Optional[Square],
) -> list[Move]:
    """
    Keep the candidates of `color` that are legal, in the order they were generated.
    ----

    1. en passant candidates get upgraded (or dropped if there is no pawn to take)
    2. two-file king jumps get tagged as castling
    3. castling has to pass its own checks before anything else
    4. nothing may leave your own king attacked
    """
    legal_moves: list[Move] = []
    for candidate in candidates:
        move = _tag_en_passant(board, candidate, en_passant_target)
        if move is None:
            continue

        move = _tag_castling(move)
        if move.castle is not None:
            if not _is_castling_allowed(board, move, color):
                continue
        elif _is_king_jump(move):
            # a king only jumps two files when castling
            continue

        if _is_putting_yourself_in_check(board, move, color):
            continue

        legal_moves.append(move)
    return legal_moves


def legal_moves_from(
    board: Board, square: Square, color: Color, en_passant_target: Optional[Square]
) -> list[Move]:
    """Legal moves of the piece on `square`. Empty if that is not a piece of `color` (or not a square at all)."""
    if not square.is_within_bounds():
        return []
    piece = board.piece(square)
    if piece is None or piece.color != color:
        return []
    candidates = candidate_moves(board, square, en_passant_target)
    return filter_legal(board, candidates, color, en_passant_target)


def all_moves_for_color(
    board: Board, color: Color, en_passant_target: Optional[Square]
) -> list[Move]:
    """Every legal move of `color`, piece by piece (row by row, then column)"""
    legal_moves: list[Move] = []
    for square in board.locate_color(color):
        legal_moves.extend(legal_moves_from(board, square, color, en_passant_target))
    return legal_moves


def has_legal_move(
    board: Board, color: Color, en_passant_target: Optional[Square]
) -> bool:
    return any(
        legal_moves_from(board, square, color, en_passant_target)
        for square in board.locate_color(color)
    )
