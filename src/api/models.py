"""Requests and Response models exchanged with the view layer"""

from typing import Optional, Self

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import CastleSide, Color, PieceType, Status
from src.engine.game import GameState, get_all_legal_moves
from src.engine.moves import Move
from src.engine.pieces import Piece
from src.engine.square import Square, is_algebraic_square

SquareName = str


def _validate_square_name(value: str) -> str:
    if not is_algebraic_square(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class LegalMovesRequest(BaseModel):
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.PAWN, PieceType.KING):
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


# --- RESPONSE MODELS ---
class PieceModel(BaseModel):
    piece_type: PieceType
    color: Color
    has_moved: bool

    @classmethod
    def from_domain(cls, piece: Piece) -> Self:
        return cls(
            piece_type=PieceType[piece.kind.name],
            color=Color[piece.color.name],
            has_moved=piece.has_moved,
        )


class MoveResponse(BaseModel):
    from_square: SquareName
    to_square: SquareName
    uci: str
    piece: PieceModel
    captured: Optional[PieceModel]
    promotion: Optional[PieceType]
    castle: Optional[CastleSide]
    is_en_passant: bool

    @classmethod
    def from_domain(cls, move: Move) -> Self:
        return cls(
            from_square=move.from_square.to_algebraic(),
            to_square=move.to_square.to_algebraic(),
            uci=move.to_uci(),
            piece=PieceModel.from_domain(move.piece),
            captured=PieceModel.from_domain(move.captured) if move.captured else None,
            promotion=PieceType[move.promotion.name] if move.promotion else None,
            castle=CastleSide[move.castle.name] if move.castle else None,
            is_en_passant=move.is_en_passant,
        )


class LegalMovesResponse(BaseModel):
    square: SquareName
    legal_moves: list[MoveResponse]


class GameStateResponse(BaseModel):
    """
    Everything a board view needs to render a position.

    `board` lists the rows top rank first (as you look at the board with white at the bottom), squares from the
    a-file to the h-file. Empty squares are None.
    """

    placement: str
    board: list[list[Optional[PieceModel]]]
    side_to_move: Color
    in_check: bool
    status: Status
    move_history: list[str]
    en_passant_target: Optional[SquareName]
    halfmove_clock: int
    fullmove_number: int
    legal_move_count: int

    @classmethod
    def from_domain(cls, state: GameState) -> Self:
        board = state.board
        rows = [
            [
                PieceModel.from_domain(piece) if piece is not None else None
                for piece in board.grid[row]
            ]
            for row in reversed(range(len(board.grid)))
        ]
        return cls(
            placement=board.to_fen(),
            board=rows,
            side_to_move=Color[state.side_to_move.name],
            in_check=state.in_check,
            status=Status[state.status.name],
            move_history=list(state.move_history),
            en_passant_target=(
                state.en_passant_target.to_algebraic()
                if state.en_passant_target is not None
                else None
            ),
            halfmove_clock=state.halfmove_clock,
            fullmove_number=state.fullmove_number,
            legal_move_count=len(get_all_legal_moves(state)),
        )


def to_square(name: SquareName) -> Square:
    """Requests are validated, so this is safe to call on their square fields"""
    return Square.from_algebraic(name)
