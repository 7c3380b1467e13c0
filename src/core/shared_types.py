"""
Type definitions used across layers

These are the names the view layer sees. The engine keeps its own enums (src/engine), the API models translate.
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class CastleSide(StrEnum):
    KING_SIDE = "king side"
    QUEEN_SIDE = "queen side"
