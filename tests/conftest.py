"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/helpers required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.engine.game import GameState, generate_legal_moves, get_initial_game_state, make_move
from src.engine.moves import Move
from src.engine.square import Square

EMPTY_PLACEMENT = "/".join(["8"] * 8)
PlayFn = Callable[..., GameState]


def find_move(state: GameState, uci: str) -> Move:
    """Look up the legal move written in UCI notation (ex. 'e2e4', 'a7a8q'). Fails the test if there is none."""
    from_square = Square.from_algebraic(uci[:2])
    matches = [
        move for move in generate_legal_moves(state, from_square) if move.to_uci() == uci
    ]
    assert matches, f"{uci} is not a legal move in this position"
    return matches[0]


@pytest.fixture
def initial_state() -> GameState:
    return get_initial_game_state()


@pytest.fixture
def play() -> PlayFn:
    """Call the inner function with a state and any number of UCI moves. Every move must be accepted."""

    def _play(state: GameState, *moves_uci: str) -> GameState:
        for uci in moves_uci:
            new_state = make_move(state, find_move(state, uci))
            assert new_state is not state, f"{uci} got rejected"
            state = new_state
        return state

    return _play
