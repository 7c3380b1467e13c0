"""Unit tests for /src/engine/board.py"""

from unittest.mock import Mock, patch

import pytest

from src.core.exceptions import InvalidPositionError
from src.engine.board import Board, apply_move, is_valid_placement
from src.engine.castling import CastleSide
from src.engine.moves import Move
from src.engine.pieces import Color, Piece, PieceKind
from src.engine.square import Square

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


# -- CREATION LOGIC ---
def test_creating_board_in_starting_position() -> None:
    """Make sure board position is correctly initialized using a partial FEN string"""
    board = Board.from_fen(STARTING_POSITION_FEN)

    back_rank = [
        PieceKind.ROOK,
        PieceKind.KNIGHT,
        PieceKind.BISHOP,
        PieceKind.QUEEN,
        PieceKind.KING,
        PieceKind.BISHOP,
        PieceKind.KNIGHT,
        PieceKind.ROOK,
    ]
    for col, kind in enumerate(back_rank):
        assert board.piece(Square(0, col)) == Piece(kind, Color.WHITE)
        assert board.piece(Square(1, col)) == Piece(PieceKind.PAWN, Color.WHITE)
        assert board.piece(Square(6, col)) == Piece(PieceKind.PAWN, Color.BLACK)
        assert board.piece(Square(7, col)) == Piece(kind, Color.BLACK)

    for row in range(2, 6):
        for col in range(8):
            assert board.piece(Square(row, col)) is None


@pytest.mark.parametrize(
    "placement",
    [
        STARTING_POSITION_FEN,
        EMPTY_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        "8/8/8/3Pp3/8/8/8/4K2k",
    ],
)
def test_fen_roundtrip(placement: str) -> None:
    assert Board.from_fen(placement).to_fen() == placement


@pytest.mark.parametrize(
    "placement",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP",  # only 7 ranks
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNRR",  # 9 files
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX",  # unknown piece
        "rnbqkbnr/pppppppp/7/8/8/8/PPPPPPPP/RNBQKBNR",  # 7 files
        "k7/8/8/8/8/8/8/K6\u00b9",  # superscript one is a digit, but not a run length
        "k7/8/8/8/8/8/8/K6\u0661",  # arabic-indic one
        "k7/8/8/8/8/8/8/\u212a7",  # kelvin sign lowercases to k
        "k7/8/8/8/8/8/8/K07",  # no empty run of zero
    ],
)
def test_invalid_placement(placement: str) -> None:
    assert not is_valid_placement(placement)
    with pytest.raises(InvalidPositionError):
        Board.from_fen(placement)


def test_piece_out_of_bounds_reads_as_empty() -> None:
    board = Board.from_fen(STARTING_POSITION_FEN)
    assert board.piece(Square(8, 0)) is None
    assert board.piece(Square(-1, -1)) is None
    assert board.piece(Square(0, 42)) is None


def test_with_pieces_does_not_touch_original() -> None:
    """Copy on write: the original board must be unaffected"""
    board = Board.from_fen(EMPTY_FEN)
    new_board = board.place_piece(Piece(PieceKind.QUEEN, Color.WHITE), sq("d4"))
    assert board.piece(sq("d4")) is None
    assert new_board.piece(sq("d4")) == Piece(PieceKind.QUEEN, Color.WHITE)
    assert new_board.remove_piece(sq("d4")) == board


def test_with_pieces_off_the_board() -> None:
    with pytest.raises(ValueError):
        Board.empty().remove_piece(Square(8, 8))


def test_locate_color_and_king() -> None:
    board = Board.from_fen(STARTING_POSITION_FEN)
    assert len(board.locate_color(Color.WHITE)) == 16
    assert len(board.locate_color(Color.BLACK)) == 16
    assert board.find_king(Color.WHITE) == sq("e1")
    assert board.find_king(Color.BLACK) == sq("e8")
    assert Board.empty().find_king(Color.WHITE) is None


# -- CHECK --
def test_is_check() -> None:
    # black rook on e8 looks down the e-file onto the white king
    board = Board.from_fen("k3r3/8/8/8/8/8/8/4K3")
    assert board.is_check(Color.WHITE)
    assert not board.is_check(Color.BLACK)


def test_blocked_check() -> None:
    board = Board.from_fen("k3r3/8/8/8/4N3/8/8/4K3")
    assert not board.is_check(Color.WHITE)


def test_no_king_is_never_in_check() -> None:
    board = Board.from_fen("4r3/8/8/8/8/8/8/8")
    assert not board.is_check(Color.WHITE)


def test_is_attacked_asks_every_attack_rule() -> None:
    """Patch the attack rules: all of them get called when none of them finds an attacker"""
    mock_rules = {name: Mock(return_value=False) for name in ("pawn", "knight", "diagonal", "straight", "king")}
    board = Board.from_fen(STARTING_POSITION_FEN)
    with patch.dict("src.engine.moves.ATTACK_RULES", mock_rules):
        assert not board.is_attacked(sq("e4"), Color.BLACK)
    for mock_rule in mock_rules.values():
        mock_rule.assert_called_once_with(sq("e4"), Color.BLACK, board)


# -- APPLYING MOVES --
def test_apply_simple_move() -> None:
    board = Board.from_fen(STARTING_POSITION_FEN)
    knight = board.piece(sq("g1"))
    assert knight is not None
    move = Move(sq("g1"), sq("f3"), knight)
    new_board = board.apply_move(move)

    assert new_board.piece(sq("g1")) is None
    assert new_board.piece(sq("f3")) == Piece(PieceKind.KNIGHT, Color.WHITE, has_moved=True)
    # the original board is untouched
    assert board.piece(sq("g1")) == knight
    assert board.piece(sq("f3")) is None
    assert apply_move(board, move) == new_board


def test_apply_capture() -> None:
    board = Board.from_fen("4k3/8/8/3p4/8/8/8/3RK3")
    rook = board.piece(sq("d1"))
    pawn = board.piece(sq("d5"))
    assert rook is not None
    new_board = board.apply_move(Move(sq("d1"), sq("d5"), rook, captured=pawn))
    assert new_board.piece(sq("d5")) == rook.moved()
    assert len(new_board.locate_color(Color.BLACK)) == 1


def test_apply_en_passant() -> None:
    """The pawn taken does not stand on the target square"""
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    white_pawn = board.piece(sq("e5"))
    black_pawn = board.piece(sq("d5"))
    assert white_pawn is not None
    move = Move(
        sq("e5"),
        sq("d6"),
        white_pawn,
        captured=black_pawn,
        is_en_passant=True,
        en_passant_captured_square=sq("d5"),
    )
    new_board = board.apply_move(move)
    assert new_board.piece(sq("d6")) == white_pawn.moved()
    assert new_board.piece(sq("d5")) is None
    assert new_board.piece(sq("e5")) is None


@pytest.mark.parametrize(
    "placement, king_from, king_to, side, rook_from, rook_to",
    [
        ("4k3/8/8/8/8/8/8/R3K2R", "e1", "g1", CastleSide.KING_SIDE, "h1", "f1"),
        ("4k3/8/8/8/8/8/8/R3K2R", "e1", "c1", CastleSide.QUEEN_SIDE, "a1", "d1"),
        ("r3k2r/8/8/8/8/8/8/4K3", "e8", "g8", CastleSide.KING_SIDE, "h8", "f8"),
        ("r3k2r/8/8/8/8/8/8/4K3", "e8", "c8", CastleSide.QUEEN_SIDE, "a8", "d8"),
    ],
)
def test_apply_castling(
    placement: str,
    king_from: str,
    king_to: str,
    side: CastleSide,
    rook_from: str,
    rook_to: str,
) -> None:
    """King and rook both move, and both are marked as moved"""
    board = Board.from_fen(placement)
    king = board.piece(sq(king_from))
    assert king is not None
    new_board = board.apply_move(Move(sq(king_from), sq(king_to), king, castle=side))

    assert new_board.piece(sq(king_from)) is None
    assert new_board.piece(sq(rook_from)) is None
    moved_king = new_board.piece(sq(king_to))
    moved_rook = new_board.piece(sq(rook_to))
    assert moved_king is not None and moved_king.kind == PieceKind.KING
    assert moved_rook is not None and moved_rook.kind == PieceKind.ROOK
    assert moved_king.has_moved and moved_rook.has_moved


def test_apply_promotion() -> None:
    board = Board.from_fen("7k/P7/8/8/8/8/8/K7")
    pawn = board.piece(sq("a7"))
    assert pawn is not None
    new_board = board.apply_move(Move(sq("a7"), sq("a8"), pawn, promotion=PieceKind.KNIGHT))
    assert new_board.piece(sq("a8")) == Piece(PieceKind.KNIGHT, Color.WHITE, has_moved=True)
    assert new_board.piece(sq("a7")) is None
