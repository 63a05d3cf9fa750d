# starharvest/sim/session.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Protocol, Tuple

from loguru import logger

from starharvest.sim.bodies import Planet, StarSystem
from starharvest.sim.entities import Robot, RobotTask
from starharvest.sim.harvesting import HarvestConfig, HarvestingEngine, HarvestReport
from starharvest.sim.ledger import Inventory
from starharvest.sim.offline import OfflineReport, reconcile_offline
from starharvest.sim.robots import RobotRegistry, upgrade_cost

GameMode = Literal["space", "planetary"]
Vec3 = Tuple[float, float, float]

INVENTORY_KEY = "inventory"
ROBOTS_KEY = "robots"
LAST_VISIT_KEY = "lastVisit"


class RecordStore(Protocol):
    def load(self, key: str) -> Optional[Any]: ...

    def save_many(self, records: Dict[str, Any]) -> None: ...


@dataclass
class SessionConfig:
    player_start: Vec3 = (0.0, 0.0, 3000.0)
    surface_spawn: Vec3 = (0.0, 2.0, 0.0)
    harvest: HarvestConfig = field(default_factory=HarvestConfig)


def decode_last_visit(raw: Any, now: int) -> int:
    """Persisted lastVisit as epoch ms. Missing or unusable values mean "now"."""
    if isinstance(raw, bool):
        return now
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    if raw is not None:
        logger.warning("Malformed lastVisit record {!r}, using now", raw)
    return now


class Session:
    """
    The simulation context: world, inventory, robots and game mode.

    Every state change goes through a method here. Changes to persisted state
    (inventory, robots, lastVisit) are written to the store before the method
    returns, and inventory and robots are always written together.

    Commands naming unknown ids, or that can't be afforded, change nothing
    and return False.
    """

    def __init__(
        self,
        store: RecordStore,
        world: StarSystem,
        now: int,
        cfg: SessionConfig | None = None,
    ):
        self.cfg = cfg or SessionConfig()
        self.store = store
        self.engine = HarvestingEngine(self.cfg.harvest)

        self.star_systems: List[StarSystem] = [world]
        self.current_system: Optional[StarSystem] = world

        self.mode: GameMode = "space"
        self.current_planet: Optional[Planet] = None
        self.player_position: Vec3 = self.cfg.player_start
        self.surface_position: Vec3 = (0.0, 0.0, 0.0)

        self.inventory = Inventory.from_dict(store.load(INVENTORY_KEY))
        self.robots = RobotRegistry.from_records(store.load(ROBOTS_KEY))
        self.last_visit_time: int = decode_last_visit(store.load(LAST_VISIT_KEY), int(now))

        self._resumed = False

    @property
    def world(self) -> StarSystem:
        return self.star_systems[0]

    # ----------------------------
    # Persistence
    # ----------------------------

    def _persist(self, *, last_visit: bool = False) -> None:
        records: Dict[str, Any] = {
            INVENTORY_KEY: self.inventory.to_dict(),
            ROBOTS_KEY: self.robots.to_records(),
        }
        if last_visit:
            records[LAST_VISIT_KEY] = int(self.last_visit_time)
        self.store.save_many(records)

    def checkpoint(self, now: int) -> None:
        """Mark now as the last time the player was present and save everything."""
        self.last_visit_time = int(now)
        self._persist(last_visit=True)

    # ----------------------------
    # Offline progress
    # ----------------------------

    @property
    def resumed(self) -> bool:
        return self._resumed

    def resume(self, now: int) -> OfflineReport:
        """
        Credit robot work done while the game was closed. Runs once per session;
        later calls report nothing. Absences under the floor leave lastVisit alone.
        """
        if self._resumed:
            return OfflineReport(elapsed_ms=0)
        self._resumed = True

        report = reconcile_offline(
            self.robots, self.world, self.last_visit_time, now, self.cfg.harvest
        )
        if not report.applied:
            logger.info("Offline for {} ms, below reconcile floor", report.elapsed_ms)
            return report

        for key, amount in report.gains.items():
            self.inventory.credit(key, amount)

        self.last_visit_time = int(now)
        self._persist(last_visit=True)
        logger.info(
            "Offline progress over {:.2f} h: +{} minerals, +{} energy",
            report.elapsed_ms / 3_600_000,
            report.minerals_gained,
            report.energy_gained,
        )
        return report

    # ----------------------------
    # Frame tick
    # ----------------------------

    def tick(self, now: int, dt: float) -> HarvestReport:
        """
        One frame: finish due manual harvests, then step robots on the current
        planet. Offline progress is reconciled first if it hasn't been yet.
        """
        if not self._resumed:
            self.resume(now)

        report = self.engine.complete_manual_harvests(self.world, now)
        if self.mode == "planetary":
            report.merge(
                self.engine.step_robots(self.robots, self.world, self.current_planet, now, dt)
            )

        for key, amount in report.gains.items():
            self.inventory.credit(key, amount)

        if report.persisted_state_changed:
            self._persist()
        return report

    # ----------------------------
    # Navigation
    # ----------------------------

    def set_current_system(self, system_id: Optional[str]) -> bool:
        if system_id is None:
            self.current_system = None
            return True
        for s in self.star_systems:
            if s.id == system_id:
                self.current_system = s
                return True
        return False

    def set_player_position(self, x: float, y: float, z: float) -> None:
        self.player_position = (float(x), float(y), float(z))

    def set_surface_position(self, x: float, y: float, z: float) -> None:
        self.surface_position = (float(x), float(y), float(z))

    def land_on_planet(self, planet_id: str) -> bool:
        planet = self.world.find_planet(planet_id)
        if planet is None:
            return False
        self.mode = "planetary"
        self.current_planet = planet
        self.surface_position = self.cfg.surface_spawn
        logger.info("Landed on {}", planet.name)
        return True

    def return_to_space(self) -> bool:
        if self.mode == "space":
            return False
        self.mode = "space"
        self.current_planet = None
        self.surface_position = (0.0, 0.0, 0.0)
        return True

    # ----------------------------
    # Commands
    # ----------------------------

    def create_robot(self, x: float, y: float, z: float, now: int) -> Robot:
        robot = self.robots.create(x, y, z, now)
        self._persist()
        return robot

    def assign_robot(self, robot_id: str, resource_id: str) -> bool:
        if self.world.find_resource(resource_id) is None:
            return False
        if not self.robots.assign(robot_id, resource_id):
            return False
        self._persist()
        return True

    def set_robot_task(self, robot_id: str, task: RobotTask) -> bool:
        if not self.robots.set_task(robot_id, task):
            return False
        self._persist()
        return True

    def upgrade_robot(self, robot_id: str) -> bool:
        if not self.robots.upgrade(robot_id, self.inventory, self.cfg.harvest.upgrade_cost_per_level):
            return False
        self._persist()
        return True

    def harvest_resource(self, resource_id: str, now: int) -> bool:
        """Start a manual harvest of a node on the current planet."""
        if self.mode != "planetary":
            return False
        return self.engine.begin_manual_harvest(self.current_planet, resource_id, now)

    # ----------------------------
    # Read side
    # ----------------------------

    def upgrade_cost(self, robot_id: str) -> Optional[int]:
        robot = self.robots.get(robot_id)
        if robot is None:
            return None
        return upgrade_cost(robot, self.cfg.harvest.upgrade_cost_per_level)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-friendly view for the presentation layer."""
        system = self.current_system
        robots = []
        for r in self.robots:
            d = r.to_dict()
            d["upgrade_cost"] = upgrade_cost(r, self.cfg.harvest.upgrade_cost_per_level)
            robots.append(d)

        return {
            "mode": self.mode,
            "current_system": (
                {"id": system.id, "name": system.name, "position": [system.x, system.y, system.z]}
                if system
                else None
            ),
            "current_planet": self.current_planet.to_dict() if self.current_planet else None,
            "star_systems": [s.to_dict() for s in self.star_systems],
            "player_position": list(self.player_position),
            "surface_position": list(self.surface_position),
            "inventory": self.inventory.to_dict(),
            "robots": robots,
            "harvesting": sorted(self.engine.pending_manual),
            "last_visit_time": self.last_visit_time,
        }
