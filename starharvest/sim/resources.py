# starharvest/sim/resources.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal


ResourceKind = Literal["mineral", "energy"]


@dataclass(frozen=True)
class ResourceDef:
    """
    Definition of a harvestable resource kind (not an amount).
    inventory_key is the name the kind is counted under in the player's inventory.
    """
    id: str
    name: str
    inventory_key: str


# Canonical resource kinds. Nodes carry `id`, inventories count `inventory_key`.
RESOURCES: Dict[str, ResourceDef] = {
    "mineral": ResourceDef(id="mineral", name="Mineral", inventory_key="minerals"),
    "energy": ResourceDef(id="energy", name="Energy", inventory_key="energy"),
}

INVENTORY_KEYS = tuple(r.inventory_key for r in RESOURCES.values())


def inventory_key_for(kind: str) -> str:
    return RESOURCES[kind].inventory_key


def _validate_resources() -> None:
    keys = set()
    for rid, r in RESOURCES.items():
        if rid != r.id:
            raise ValueError(f"Resource key '{rid}' must match ResourceDef.id '{r.id}'")
        if r.inventory_key in keys:
            raise ValueError(f"Duplicate inventory key: {r.inventory_key}")
        keys.add(r.inventory_key)


_validate_resources()
