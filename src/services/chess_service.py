"""Orchestration of communication from the view layer to the rules engine (and the reverse direction)."""

import logging
from typing import Optional

from src.api.models import (
    GameStateResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    to_square,
)
from src.engine.game import (
    GameState,
    generate_legal_moves,
    get_initial_game_state,
    make_move,
)
from src.engine.moves import Move
from src.engine.pieces import PieceKind

logger = logging.getLogger(__name__)


class ChessService:
    """
    Stateless: the caller keeps the states.

    A view typically holds a list of GameStates plus a cursor (for undo/redo). It passes the state currently shown
    into every call and appends whatever comes back if it is not the same object.
    """

    def new_game(self) -> GameState:
        return get_initial_game_state()

    def describe(self, state: GameState) -> GameStateResponse:
        """Render-ready view of the state"""
        return GameStateResponse.from_domain(state)

    def legal_moves(
        self, state: GameState, request: LegalMovesRequest
    ) -> LegalMovesResponse:
        """Where can the piece on the selected square go? (to highlight squares)"""
        moves = generate_legal_moves(state, to_square(request.square))
        return LegalMovesResponse(
            square=request.square,
            legal_moves=[MoveResponse.from_domain(move) for move in moves],
        )

    def requires_promotion_choice(self, state: GameState, request: MoveRequest) -> bool:
        """Would this destination promote a pawn? Then the view has to ask which piece before sending the move."""
        return any(
            move.promotion is not None
            for move in self._moves_to_destination(state, request)
        )

    def make_move(self, state: GameState, request: MoveRequest) -> GameState:
        """
        Make a move attempt.
        ----

        The request only names origin, destination and (maybe) the promotion choice. The matching move is looked
        up and handed to the engine, which checks it once more. Returns the same state when nothing matched.
        """
        candidate = self._build_candidate(state, request)
        if candidate is None:
            logger.debug(
                "No legal move %s -> %s (promote_to=%s)",
                request.from_square,
                request.to_square,
                request.promote_to,
            )
            return state

        new_state = make_move(state, candidate)
        if new_state is not state:
            logger.info(
                "Played %s, %s to move",
                new_state.move_history[-1],
                new_state.side_to_move.name.lower(),
            )
        return new_state

    # -- Internal helpers --
    def _moves_to_destination(
        self, state: GameState, request: MoveRequest
    ) -> list[Move]:
        destination = to_square(request.to_square)
        return [
            move
            for move in generate_legal_moves(state, to_square(request.from_square))
            if move.to_square == destination
        ]

    def _build_candidate(
        self, state: GameState, request: MoveRequest
    ) -> Optional[Move]:
        """Pick the move the request stands for. A pawn reaching the last rank needs a promotion choice."""
        promotion = PieceKind[request.promote_to.name] if request.promote_to else None
        for move in self._moves_to_destination(state, request):
            if move.promotion == promotion:
                return move
        return None
