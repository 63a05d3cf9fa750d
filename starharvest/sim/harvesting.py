# starharvest/sim/harvesting.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from loguru import logger

from starharvest.sim.bodies import Planet, StarSystem
from starharvest.sim.entities import Robot
from starharvest.sim.resources import inventory_key_for


@dataclass
class HarvestConfig:
    robot_speed: float = 2.0            # world units per second
    arrival_threshold: float = 0.5      # planar distance counted as "at" a node
    robot_cooldown_ms: int = 2000       # min gap between robot harvest cycles
    manual_amount: int = 10             # units per player click
    manual_duration_ms: int = 1000      # a clicked node is busy this long
    offline_floor_ms: int = 60_000      # shorter absences are not reconciled
    offline_rate_per_hour: int = 10     # offline units per efficiency per hour
    upgrade_cost_per_level: int = 10    # minerals per current efficiency level


@dataclass
class HarvestReport:
    """Effects of one engine pass. gains are keyed by inventory key."""
    gains: Dict[str, int] = field(default_factory=dict)
    idled: List[str] = field(default_factory=list)
    depleted: List[str] = field(default_factory=list)
    moved: List[str] = field(default_factory=list)

    def credit(self, kind: str, amount: int) -> None:
        if amount <= 0:
            return
        key = inventory_key_for(kind)
        self.gains[key] = self.gains.get(key, 0) + int(amount)

    def merge(self, other: "HarvestReport") -> None:
        for k, v in other.gains.items():
            self.gains[k] = self.gains.get(k, 0) + v
        self.idled.extend(other.idled)
        self.depleted.extend(other.depleted)
        self.moved.extend(other.moved)

    @property
    def persisted_state_changed(self) -> bool:
        return bool(self.gains or self.idled)


class HarvestingEngine:
    """
    Frame-driven harvesting.

    Robots: each gathering robot walks toward its node and harvests it every
    cooldown while standing on it. Only nodes on the current planet are worked;
    robots bound to another planet keep their state until it is current again.

    Manual harvests: a click reserves a node for manual_duration_ms and the
    credit lands when that window has passed. A reserved node rejects further
    clicks, so one window can credit at most once.
    """

    def __init__(self, cfg: HarvestConfig | None = None):
        self.cfg = cfg or HarvestConfig()
        # resource_id -> epoch ms when the manual harvest completes
        self.pending_manual: Dict[str, int] = {}

    # ----------------------------
    # Robots
    # ----------------------------

    def _idle(self, robot: Robot, report: HarvestReport, reason: str) -> None:
        robot.task = "idle"
        report.idled.append(robot.id)
        logger.debug("{} idle: {}", robot.id, reason)

    def step_robots(
        self,
        robots: Iterable[Robot],
        world: StarSystem,
        current_planet: Optional[Planet],
        now: int,
        dt: float,
    ) -> HarvestReport:
        """Advance every gathering robot by dt seconds at time now (epoch ms)."""
        report = HarvestReport()
        if current_planet is None:
            return report

        for robot in robots:
            if robot.task != "gathering":
                continue

            if not robot.assigned_resource_id:
                self._idle(robot, report, "no assignment")
                continue

            hit = world.locate_resource(robot.assigned_resource_id)
            if hit is None:
                self._idle(robot, report, f"resource {robot.assigned_resource_id} is gone")
                continue

            planet, node = hit
            if planet.id != current_planet.id:
                continue

            if node.depleted:
                self._idle(robot, report, f"resource {node.id} is depleted")
                continue

            dx = node.x - robot.x
            dz = node.z - robot.z
            distance = math.hypot(dx, dz)

            if distance > self.cfg.arrival_threshold:
                if dt > 0:
                    step = min(self.cfg.robot_speed * dt, distance)
                    robot.x += dx / distance * step
                    robot.z += dz / distance * step
                    robot.y = node.y
                    report.moved.append(robot.id)
                continue

            if now - robot.last_harvest_time <= self.cfg.robot_cooldown_ms:
                continue

            taken = node.take(robot.efficiency)
            report.credit(node.kind, taken)
            robot.last_harvest_time = int(now)

            if node.depleted:
                report.depleted.append(node.id)
                logger.info("{} depleted {}", robot.id, node.id)
                self._idle(robot, report, f"resource {node.id} is depleted")

        return report

    # ----------------------------
    # Manual harvesting
    # ----------------------------

    def is_harvesting(self, resource_id: str) -> bool:
        return resource_id in self.pending_manual

    def begin_manual_harvest(self, planet: Optional[Planet], resource_id: str, now: int) -> bool:
        """Reserve a node on `planet` for a manual harvest. False if it can't be harvested now."""
        if planet is None:
            return False
        node = planet.find_resource(resource_id)
        if node is None or node.depleted:
            return False
        if resource_id in self.pending_manual:
            return False

        self.pending_manual[resource_id] = int(now) + self.cfg.manual_duration_ms
        return True

    def complete_manual_harvests(self, world: StarSystem, now: int) -> HarvestReport:
        report = HarvestReport()
        due = [rid for rid, when in self.pending_manual.items() if now >= when]

        for rid in due:
            del self.pending_manual[rid]
            node = world.find_resource(rid)
            if node is None:
                continue
            taken = node.take(self.cfg.manual_amount)
            report.credit(node.kind, taken)
            if taken and node.depleted:
                report.depleted.append(node.id)
                logger.info("Manual harvest depleted {}", node.id)

        return report
