# matchsim/__init__.py
from .oracle import LocalMatchOracle, MatchOracle, MatchRequest, parse_result, validate_result
from .playback import PlaybackController, PlaybackView

__all__ = [
    "LocalMatchOracle", "MatchOracle", "MatchRequest", "parse_result", "validate_result",
    "PlaybackController", "PlaybackView",
]
