"""
Exceptions raised at the boundaries of the engine.

The rules engine itself never raises for an illegal move (it hands back the unchanged state instead).
Only malformed input coming in from the outside ends up here.
"""


class ChessError(Exception):
    """Base class for all errors raised by this package"""


class InvalidPositionError(ChessError):
    """A piece placement that cannot be turned into a playable board (bad syntax, missing or extra kings)"""


class InvalidRequestError(ChessError):
    """A request from the view layer that cannot be interpreted"""
