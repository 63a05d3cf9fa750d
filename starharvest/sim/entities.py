# starharvest/sim/entities.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Literal, Optional


# "returning" is declared for saves and UI labels but nothing transitions into it yet.
RobotTask = Literal["idle", "gathering", "returning"]
ROBOT_TASKS = ("idle", "gathering", "returning")


@dataclass
class Robot:
    """
    An autonomous harvesting unit.
    assigned_resource_id is a weak reference by id: it may point at a node that
    was depleted or no longer exists, and must be re-resolved every cycle.
    """
    id: str
    name: str
    x: float
    y: float
    z: float
    task: RobotTask
    efficiency: int
    last_harvest_time: int  # epoch ms
    assigned_resource_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Robot":
        """
        Build a Robot from a dict loaded from JSON.
        Raises KeyError/ValueError/TypeError on a record that cannot be a robot.
        """
        task = str(d.get("task", "idle"))
        if task not in ROBOT_TASKS:
            raise ValueError(f"unknown robot task: {task}")

        efficiency = int(d.get("efficiency", 1))
        if efficiency < 1:
            raise ValueError(f"robot efficiency must be >= 1, got {efficiency}")

        assigned = d.get("assigned_resource_id")

        return Robot(
            id=str(d["id"]),
            name=str(d.get("name") or d["id"]),
            x=float(d.get("x", 0.0)),
            y=float(d.get("y", 0.0)),
            z=float(d.get("z", 0.0)),
            task=task,  # type: ignore[arg-type]
            efficiency=efficiency,
            last_harvest_time=int(d.get("last_harvest_time", 0)),
            assigned_resource_id=str(assigned) if assigned is not None else None,
        )
