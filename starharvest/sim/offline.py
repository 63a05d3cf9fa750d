# starharvest/sim/offline.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable

from starharvest.sim.bodies import StarSystem
from starharvest.sim.entities import Robot
from starharvest.sim.harvesting import HarvestConfig
from starharvest.sim.resources import inventory_key_for

MS_PER_HOUR = 3_600_000


@dataclass
class OfflineReport:
    elapsed_ms: int
    applied: bool = False
    gains: Dict[str, int] = field(default_factory=dict)

    @property
    def minerals_gained(self) -> int:
        return self.gains.get("minerals", 0)

    @property
    def energy_gained(self) -> int:
        return self.gains.get("energy", 0)


def offline_yield(efficiency: int, elapsed_ms: int, rate_per_hour: int) -> int:
    """Units a robot gathers while the game is closed (before the node cap)."""
    hours = elapsed_ms / MS_PER_HOUR
    return int(math.floor(efficiency * hours * rate_per_hour))


def reconcile_offline(
    robots: Iterable[Robot],
    world: StarSystem,
    last_visit: int,
    now: int,
    cfg: HarvestConfig | None = None,
) -> OfflineReport:
    """
    Closed-form catch-up for time spent away.

    Every gathering robot whose node still exists and isn't depleted takes
    floor(efficiency * hours * rate) units, capped at what the node holds.
    Nodes emptied here are marked depleted; robots are left as they are and
    go idle on their next frame. Absences under the floor are not reconciled
    and report applied=False.
    """
    cfg = cfg or HarvestConfig()
    elapsed = int(now) - int(last_visit)
    report = OfflineReport(elapsed_ms=elapsed)

    if elapsed < cfg.offline_floor_ms:
        return report

    report.applied = True
    for robot in robots:
        if robot.task != "gathering" or not robot.assigned_resource_id:
            continue

        node = world.find_resource(robot.assigned_resource_id)
        if node is None or node.depleted:
            continue

        taken = node.take(offline_yield(robot.efficiency, elapsed, cfg.offline_rate_per_hour))
        if taken:
            key = inventory_key_for(node.kind)
            report.gains[key] = report.gains.get(key, 0) + taken

    return report
