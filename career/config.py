# career/config.py
from __future__ import annotations

import os
from dataclasses import dataclass

# -------- League / Season --------
SEASON_LENGTH: int = 38              # matchdays per season
PROMOTION_SLOTS: int = 3             # clubs swapped between tier 1 and tier 2
TIER_STRENGTH = {1: 84, 2: 74}       # opponent strength handed to the oracle

# Points (W-D-L = 3-1-0)
POINTS_WIN: int = 3
POINTS_DRAW: int = 1
POINTS_LOSS: int = 0

# -------- Job security --------
SECURITY_START: int = 80
SECURITY_MAX: int = 100
SECURITY_WIN: int = 4
SECURITY_DRAW: int = 0
SECURITY_LOSS: int = -12
SECURITY_PLEDGE_MULT: int = 2        # losses count double after a pledge
SECURITY_CRISIS: int = 20            # strictly below -> board ultimatum
SECURITY_WARNING: int = 25           # strictly below -> flagged
SECURITY_PLEDGE_RESET: int = 35

# -------- Finances --------
START_FUNDS: int = 55_000_000
SEASON_END_BONUS: int = 20_000_000
FFP_HEALTHY_LIMIT: int = 15_000_000
FFP_WARNING_LIMIT: int = 30_000_000
MANAGER_SALARY: int = 50_000
MANAGER_CONTRACT_YEARS: int = 3

RENEWAL_RAISE: float = 1.15
RENEWAL_FEE_WEEKS: int = 4
RENEWAL_YEARS: int = 4

ACADEMY_MAX_LEVEL: int = 5
ACADEMY_RECRUIT_FEE: int = 500_000
ACADEMY_UPGRADE_COST: int = 5_000_000    # multiplied by the current level

STADIUM_EXPANSION_COST: int = 10_000_000  # multiplied by the current facility level
STADIUM_EXPANSION_SEATS: int = 5_000

# -------- Squad --------
STARTING_XI_SIZE: int = 11
FITNESS_REST_GAIN: int = 5
FITNESS_MATCH_COST: int = 12
FITNESS_MATCH_FLOOR: int = 50
HISTORY_DISPLAY: int = 5

# -------- Match playback --------
FINAL_MINUTE: int = 95
BASE_TICK_SECONDS: float = 1.0       # one minute per second at speed 1
SPEEDS = (1, 2, 4, 8)

# -------- RNG / Seeds --------
DEFAULT_SEED: int = 1337

# -------- Persistence --------
SAVE_DIR = "saves"
STORAGE_KEY = "fm_career_save"
TRANSACTION_JOURNAL_LIMIT: int = 200

# -------- External services --------
MATCH_ORACLE_URL = os.getenv("MATCH_ORACLE_URL", "http://127.0.0.1:8765/simulate")
MATCH_ORACLE_TIMEOUT: float = float(os.getenv("MATCH_ORACLE_TIMEOUT", "30"))


@dataclass(frozen=True)
class Rules:
    """Switches for behaviour that differed between game variants."""
    enforce_starting_xi: bool = True
    update_form: bool = True
    save_filler: bool = True
    simulate_other_fixtures: bool = True
    promotion: bool = True
