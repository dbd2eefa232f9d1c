# Area: Rounds
"""
lastcall_engine._rounds.constants — Game-wide round constants
=============================================================
"""

# Every point value any round may declare
LEGAL_POINT_VALUES = (1, 2, 3, 4, 5, 6)

# Canonical Last Call format
LAST_CALL_ROUND_1_POINTS = (1, 3, 5)
LAST_CALL_ROUND_2_POINTS = (2, 4, 6)

# Advisory; enforced by an external timer, never by the engine
DEFAULT_ROUND_TIME_LIMIT_SECONDS = 300
