# Area: Rounds
"""
lastcall_engine._rounds.point_usage — Point-value usage table
=============================================================

Records which point values each participant has spent in each round.
Keyed by the composite (participant_id, round_number) so a lookup is a
single dict access. Entries are created lazily and dropped when empty.
"""

from __future__ import annotations
from typing import Dict, List, Tuple

UsageKey = Tuple[str, int]


class PointUsageTable:
    """Consumption ledger; legality checks live in RoundLedger."""

    def __init__(self):
        self._usage: Dict[UsageKey, List[int]] = {}

    def used(self, participant_id: str, round_number: int) -> List[int]:
        """Values spent, in the order they were spent (copy)."""
        return list(self._usage.get((participant_id, round_number), []))

    def is_used(self, participant_id: str, round_number: int, value: int) -> bool:
        return value in self._usage.get((participant_id, round_number), ())

    def mark(self, participant_id: str, round_number: int, value: int) -> None:
        self._usage.setdefault((participant_id, round_number), []).append(value)

    def release(self, participant_id: str, round_number: int, value: int) -> bool:
        key = (participant_id, round_number)
        values = self._usage.get(key)
        if not values or value not in values:
            return False
        values.remove(value)
        if not values:
            del self._usage[key]
        return True

    def by_round(self, round_number: int) -> Dict[str, List[int]]:
        """participant_id -> values spent in one round."""
        return {
            participant_id: list(values)
            for (participant_id, number), values in self._usage.items()
            if number == round_number
        }

    def clear_round(self, round_number: int) -> None:
        for key in [k for k in self._usage if k[1] == round_number]:
            del self._usage[key]

    def clear_participant(self, participant_id: str) -> None:
        for key in [k for k in self._usage if k[0] == participant_id]:
            del self._usage[key]

    def clear(self) -> None:
        self._usage.clear()

    def to_dict(self) -> Dict[str, Dict[int, List[int]]]:
        """Nested plain form: participant_id -> round_number -> values."""
        nested: Dict[str, Dict[int, List[int]]] = {}
        for (participant_id, round_number), values in self._usage.items():
            nested.setdefault(participant_id, {})[round_number] = list(values)
        return nested

    @classmethod
    def from_dict(cls, nested: Dict[str, Dict[int, List[int]]]) -> "PointUsageTable":
        table = cls()
        for participant_id, rounds in nested.items():
            for round_number, values in rounds.items():
                if values:
                    table._usage[(participant_id, int(round_number))] = list(values)
        return table
