"""
Simplified move notation used for the move history.

<piece letter><x if capture><target square>[=<promotion letter>], or O-O / O-O-O for castling.
Ex. 'e4', 'Nf3', 'Bxc6', 'xd5' (pawn takes), 'e8=Q'.

NOTE: This is not standard algebraic notation. When two pieces of the same kind can reach the same square,
nothing tells them apart.
"""

from src.engine.moves import Move
from src.engine.pieces import PIECE_LETTERS


def move_notation(move: Move) -> str:
    if move.castle is not None:
        return move.castle.value

    piece_letter = PIECE_LETTERS[move.piece.kind]
    capture = "x" if move.is_capture else ""
    notation = f"{piece_letter}{capture}{move.to_square.to_algebraic()}"
    if move.promotion is not None:
        notation += f"={PIECE_LETTERS[move.promotion]}"
    return notation
