# starharvest/sim/ledger.py
from __future__ import annotations

import math
from typing import Any, Dict, Mapping

from loguru import logger

from starharvest.sim.resources import INVENTORY_KEYS


def _is_count(raw: Any) -> bool:
    """True for a non-negative whole number; JSON may hand us 3.0 for 3."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return False
    if isinstance(raw, float) and not (math.isfinite(raw) and raw.is_integer()):
        return False
    return raw >= 0


class Inventory:
    """
    The player's accumulated resources, counted per inventory key.
    Counts only go up through credit(); try_spend() is the single way down.
    """

    def __init__(self, minerals: int = 0, energy: int = 0):
        self.counts: Dict[str, int] = {"minerals": int(minerals), "energy": int(energy)}

    @property
    def minerals(self) -> int:
        return self.counts["minerals"]

    @property
    def energy(self) -> int:
        return self.counts["energy"]

    def get(self, key: str) -> int:
        return self.counts.get(key, 0)

    def credit(self, key: str, amount: int) -> None:
        if key not in self.counts:
            raise KeyError(f"unknown inventory key: {key}")
        if amount <= 0:
            return
        self.counts[key] += int(amount)

    def can_afford(self, cost: Mapping[str, int]) -> bool:
        return all(self.get(k) >= int(v) for k, v in cost.items())

    def try_spend(self, cost: Mapping[str, int]) -> bool:
        """
        Return True and subtract everything if the inventory covers cost.
        Return False and change nothing if it does not.
        """
        if not self.can_afford(cost):
            return False
        for k, v in cost.items():
            self.counts[k] -= int(v)
        return True

    def to_dict(self) -> Dict[str, int]:
        return dict(self.counts)

    @staticmethod
    def from_dict(d: Any) -> "Inventory":
        """
        Decode a persisted inventory record. Anything that isn't a mapping of
        non-negative integer counts falls back to an empty inventory.
        """
        if not isinstance(d, dict):
            if d is not None:
                logger.warning("Malformed inventory record ({}), using defaults", type(d).__name__)
            return Inventory()

        values: Dict[str, int] = {}
        for key in INVENTORY_KEYS:
            raw = d.get(key, 0)
            if not _is_count(raw):
                logger.warning("Malformed inventory value {}={!r}, using defaults", key, raw)
                return Inventory()
            values[key] = int(raw)

        return Inventory(**values)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Inventory) and self.counts == other.counts

    def __repr__(self) -> str:
        return f"Inventory(minerals={self.minerals}, energy={self.energy})"
