"""
The entrypoint into the rules engine.

A `GameState` is an immutable value. Playing a move never changes a state: `make_move()` returns a new one
(or the very same object when the move is not legal). Keeping a history for undo/redo is up to the caller,
who can simply hold on to the list of states.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Self

from src.core.exceptions import InvalidPositionError
from src.engine.board import Board
from src.engine.legality import all_moves_for_color, has_legal_move, legal_moves_from
from src.engine.moves import Move
from src.engine.notation import move_notation
from src.engine.pieces import Color, PieceKind
from src.engine.square import Square

logger = logging.getLogger(__name__)

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


class Status(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()


@dataclass(frozen=True)
class GameState:
    """
    Everything needed to continue a game from here.
    ----

    `in_check` and `status` are derived from board + side to move + en passant target.
    They are only computed when a state gets created through `from_placement()`, `get_initial_game_state()` or
    `make_move()`, never set by hand.

    * `en_passant_target`: the square a pawn can move to in order to take en passant. Lives for exactly one move.
    * `halfmove_clock`: moves since the last pawn move or capture. Tracked, not acted upon.
    * `fullmove_number`: starts at 1 and increments after every move black makes.
    """

    board: Board
    side_to_move: Color
    in_check: bool
    status: Status
    move_history: tuple[str, ...]
    en_passant_target: Optional[Square]
    halfmove_clock: int
    fullmove_number: int

    @classmethod
    def from_placement(
        cls,
        placement: str,
        side_to_move: Color = Color.WHITE,
        en_passant_target: Optional[Square] = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> Self:
        """
        Set up a position from the piece placement part of a FEN string.

        Raises InvalidPositionError if the placement cannot be read, or if a side does not have exactly one king.
        """
        board = Board.from_fen(placement)
        _assert_one_king_per_side(board)
        return cls.derive(
            board=board,
            side_to_move=side_to_move,
            en_passant_target=en_passant_target,
            move_history=(),
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    @classmethod
    def derive(
        cls,
        board: Board,
        side_to_move: Color,
        en_passant_target: Optional[Square],
        move_history: tuple[str, ...],
        halfmove_clock: int,
        fullmove_number: int,
    ) -> Self:
        """Build a state, working out check and game status for the side to move"""
        in_check = board.is_check(side_to_move)
        if has_legal_move(board, side_to_move, en_passant_target):
            status = Status.IN_PROGRESS
        elif in_check:
            status = Status.CHECKMATE
        else:
            status = Status.STALEMATE

        return cls(
            board=board,
            side_to_move=side_to_move,
            in_check=in_check,
            status=status,
            move_history=move_history,
            en_passant_target=en_passant_target,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )


def _assert_one_king_per_side(board: Board) -> None:
    for color in Color:
        kings = board.locate_pieces(PieceKind.KING, color)
        if len(kings) != 1:
            raise InvalidPositionError(
                f"Expected exactly one {color.name.lower()} king, found {len(kings)}."
            )


# --- ENGINE API CALLED BY THE VIEW LAYER ---
def get_initial_game_state() -> GameState:
    """Standard starting position, white to move"""
    return GameState.from_placement(STARTING_PLACEMENT)


def generate_legal_moves(state: GameState, from_square: Square) -> list[Move]:
    """
    Legal moves of the piece on `from_square`.

    Used to highlight where a selected piece can go. Empty when the square is empty, holds a piece of the side
    not to move, or does not exist.
    """
    return legal_moves_from(
        state.board, from_square, state.side_to_move, state.en_passant_target
    )


def get_all_legal_moves(state: GameState) -> list[Move]:
    """Every legal move of the side to move"""
    return all_moves_for_color(
        state.board, state.side_to_move, state.en_passant_target
    )


def make_move(state: GameState, move: Move) -> GameState:
    """
    Attempt to make a move
    -----

    The move may come from anywhere (ex. a view that only knows origin and destination), so nothing on it is
    trusted: the legal moves from its origin are generated again, and the one with the same destination,
    promotion and castling flag gets played.

    Illegal? The unchanged state is returned (the same object). Not an error.

    1. update the board
    2. hand the turn to the opponent
    3. set the en passant target (only right after a double step)
    4. check / checkmate / stalemate for the side now to move
    5. notation into the move history, move counters
    """
    legal_moves = generate_legal_moves(state, move.from_square)
    accepted = next((legal for legal in legal_moves if legal.matches(move)), None)
    if accepted is None:
        logger.debug(
            "Rejected move from %s to %s (promotion=%s, castle=%s)",
            move.from_square,
            move.to_square,
            move.promotion,
            move.castle,
        )
        return state

    player_color = state.side_to_move
    board = state.board.apply_move(accepted)

    en_passant_target = (
        accepted.from_square.offset(player_color.forward, 0)
        if accepted.is_double_step
        else None
    )

    is_pawn_move = accepted.piece.kind == PieceKind.PAWN
    halfmove_clock = (
        0 if (is_pawn_move or accepted.is_capture) else state.halfmove_clock + 1
    )
    fullmove_number = (
        state.fullmove_number + 1
        if player_color == Color.BLACK
        else state.fullmove_number
    )

    new_state = GameState.derive(
        board=board,
        side_to_move=player_color.opponent,
        en_passant_target=en_passant_target,
        move_history=state.move_history + (move_notation(accepted),),
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
    )
    if new_state.status != Status.IN_PROGRESS:
        logger.debug(
            "Game over after %s: %s", new_state.move_history[-1], new_state.status.name
        )
    return new_state


# --- CHECKS FOR ENDING THE GAME ---
def is_checkmate(state: GameState) -> bool:
    return state.status == Status.CHECKMATE


def is_stalemate(state: GameState) -> bool:
    return state.status == Status.STALEMATE
