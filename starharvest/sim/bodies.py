# starharvest/sim/bodies.py
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional, Tuple

from starharvest.sim.resources import ResourceKind


@dataclass
class ResourceNode:
    """
    A harvestable deposit on a planet surface.
    depleted is kept in step with amount: it flips to True once amount reaches 0
    and never flips back.
    """
    id: str
    kind: ResourceKind
    x: float
    y: float
    z: float
    amount: int
    depleted: bool = False

    def take(self, requested: int) -> int:
        """
        Remove up to `requested` units and return how many were actually taken.
        Marks the node depleted in the same call that takes the last unit.
        """
        if self.depleted or requested <= 0:
            return 0
        taken = min(int(requested), self.amount)
        self.amount -= taken
        if self.amount <= 0:
            self.amount = 0
            self.depleted = True
        return taken

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Planet:
    """
    A landable planet. system_id is a back-reference only; the StarSystem owns the planet.
    radius, color and orbit_radius are for presentation; orbit_index orders planets.
    """
    id: str
    name: str
    system_id: str
    orbit_index: int
    orbit_radius: float
    radius: float
    color: str
    resources: List[ResourceNode] = field(default_factory=list)

    def find_resource(self, resource_id: str) -> Optional[ResourceNode]:
        for node in self.resources:
            if node.id == resource_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StarSystem:
    id: str
    name: str
    x: float
    y: float
    z: float
    planets: List[Planet] = field(default_factory=list)

    def find_planet(self, planet_id: str) -> Optional[Planet]:
        for p in self.planets:
            if p.id == planet_id:
                return p
        return None

    def locate_resource(self, resource_id: str) -> Optional[Tuple[Planet, ResourceNode]]:
        """Resolve a resource id against every planet. None means it no longer exists."""
        for p in self.planets:
            node = p.find_resource(resource_id)
            if node is not None:
                return p, node
        return None

    def find_resource(self, resource_id: str) -> Optional[ResourceNode]:
        hit = self.locate_resource(resource_id)
        return hit[1] if hit else None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

