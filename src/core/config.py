"""
Rule thresholds.

Limits that decide the game (fifty-move rule, threefold repetition) live next to the advisory thresholds the UI
uses to warn players. Passed around explicitly, there is no global state to patch.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RulesConfig:
    # 100 half-moves = 50 moves by each player
    fifty_move_limit: int = 100
    fifty_move_warning: int = 90
    repetition_limit: int = 3
    repetition_warning: int = 2


DEFAULT_RULES = RulesConfig()
