# starharvest/sim/robots.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from loguru import logger

from starharvest.sim.entities import ROBOT_TASKS, Robot, RobotTask
from starharvest.sim.ledger import Inventory


def upgrade_cost(robot: Robot, per_level: int) -> int:
    return robot.efficiency * per_level


class RobotRegistry:
    """
    Ordered set of robots. Robots are never removed.
    Commands that name an unknown robot id do nothing and return False.
    """

    def __init__(self, robots: Optional[List[Robot]] = None):
        self.robots: List[Robot] = list(robots or [])

    def __iter__(self) -> Iterator[Robot]:
        return iter(self.robots)

    def __len__(self) -> int:
        return len(self.robots)

    def get(self, robot_id: str) -> Optional[Robot]:
        for r in self.robots:
            if r.id == robot_id:
                return r
        return None

    def _next_number(self) -> int:
        """Next free robot number. (max of existing suffixes + 1, like station ids.)"""
        best = 0
        for r in self.robots:
            _, _, suffix = r.id.rpartition("-")
            if suffix.isdigit():
                best = max(best, int(suffix))
        return max(best, len(self.robots)) + 1

    def create(self, x: float, y: float, z: float, now: int) -> Robot:
        n = self._next_number()
        robot = Robot(
            id=f"robot-{n}",
            name=f"Robot {len(self.robots) + 1}",
            x=float(x),
            y=float(y),
            z=float(z),
            task="idle",
            efficiency=1,
            last_harvest_time=int(now),
        )
        self.robots.append(robot)
        logger.info("Created {} ({}) at ({:.1f}, {:.1f}, {:.1f})", robot.name, robot.id, x, y, z)
        return robot

    def assign(self, robot_id: str, resource_id: str) -> bool:
        robot = self.get(robot_id)
        if robot is None:
            return False
        robot.assigned_resource_id = str(resource_id)
        robot.task = "gathering"
        return True

    def set_task(self, robot_id: str, task: RobotTask) -> bool:
        robot = self.get(robot_id)
        if robot is None or task not in ROBOT_TASKS:
            return False
        robot.task = task
        return True

    def upgrade(self, robot_id: str, inventory: Inventory, per_level: int) -> bool:
        """
        Raise efficiency by 1, paying efficiency * per_level minerals.
        Soft gate: an unaffordable upgrade leaves robot and inventory untouched.
        """
        robot = self.get(robot_id)
        if robot is None:
            return False

        cost = upgrade_cost(robot, per_level)
        if not inventory.try_spend({"minerals": cost}):
            return False

        robot.efficiency += 1
        logger.info("Upgraded {} to efficiency {} for {} minerals", robot.id, robot.efficiency, cost)
        return True

    # ----------------------------
    # Serialization
    # ----------------------------

    def to_records(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.robots]

    @staticmethod
    def from_records(data: Any) -> "RobotRegistry":
        """
        Decode the persisted robot list. A payload that isn't a list of valid
        robot records is treated as malformed and yields an empty registry.
        """
        if not isinstance(data, list):
            if data is not None:
                logger.warning("Malformed robots record ({}), using defaults", type(data).__name__)
            return RobotRegistry()

        robots: List[Robot] = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning("Malformed robot entry {!r}, using defaults", item)
                return RobotRegistry()
            try:
                robots.append(Robot.from_dict(item))
            except (KeyError, ValueError, TypeError, OverflowError) as e:
                logger.warning("Malformed robot entry ({}), using defaults", e)
                return RobotRegistry()

        return RobotRegistry(robots)
