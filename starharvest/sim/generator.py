# starharvest/sim/generator.py
from __future__ import annotations

import math
import random
from typing import List, Optional

from loguru import logger

from starharvest.sim.bodies import Planet, ResourceNode, StarSystem


MIN_PLANETS = 4
MAX_PLANETS = 8
MIN_NODES = 3
MAX_NODES = 10
MIN_AMOUNT = 10
MAX_AMOUNT = 59

# Chance that a node on a planet of the given class is the class's favoured kind.
BIAS = 0.7

ROCKY_COLORS = ["#8B4513", "#A0522D", "#CD853F", "#D2691E"]
GAS_COLORS = ["#4169E1", "#9370DB", "#FF6347", "#FFD700"]

ORBIT_SCALE = 50.0


def inner_orbit_radius(index: int) -> float:
    return (4 + index * 3) * ORBIT_SCALE  # 200, 350, 500, ...


def outer_orbit_radius(outer_index: int) -> float:
    # Starts past the widest possible inner orbit (4 inner planets max -> 650).
    return (20 + outer_index * 8) * ORBIT_SCALE  # 1000, 1400, 1800, ...


def _generate_nodes(rng: random.Random, planet_index: int, is_inner: bool) -> List[ResourceNode]:
    nodes: List[ResourceNode] = []
    favoured, other = ("mineral", "energy") if is_inner else ("energy", "mineral")

    for j in range(rng.randint(MIN_NODES, MAX_NODES)):
        angle = rng.random() * math.pi * 2
        dist = rng.random() * 8
        kind = favoured if rng.random() < BIAS else other

        nodes.append(
            ResourceNode(
                id=f"resource-sol-{planet_index}-{j}",
                kind=kind,  # type: ignore[arg-type]
                x=math.cos(angle) * dist,
                y=(rng.random() - 0.5) * 2,
                z=math.sin(angle) * dist,
                amount=rng.randint(MIN_AMOUNT, MAX_AMOUNT),
                depleted=False,
            )
        )
    return nodes


def generate_star_system(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> StarSystem:
    """
    Build the single "Sol" home system.

    - 4..8 planets; the first half are inner/rocky, the rest outer/gas
    - inner planets favour minerals, outer planets favour energy
    - every node starts with 10..59 units and is not depleted

    All randomness comes from `rng` (or a Random seeded with `seed`), so the same
    seed always yields the same system.
    """
    if rng is None:
        rng = random.Random(seed)

    num_planets = rng.randint(MIN_PLANETS, MAX_PLANETS)
    inner_count = num_planets // 2

    planets: List[Planet] = []
    for i in range(num_planets):
        is_inner = i < inner_count
        if is_inner:
            orbit = inner_orbit_radius(i)
            radius = 0.5 + rng.random()
            color = ROCKY_COLORS[i % len(ROCKY_COLORS)]
        else:
            outer_index = i - inner_count
            orbit = outer_orbit_radius(outer_index)
            radius = 2.5 + rng.random() * 1.5
            color = GAS_COLORS[outer_index % len(GAS_COLORS)]

        planets.append(
            Planet(
                id=f"planet-sol-{i}",
                name=f"Sol {chr(65 + i)}",
                system_id="sol",
                orbit_index=i,
                orbit_radius=orbit,
                radius=radius,
                color=color,
                resources=_generate_nodes(rng, i, is_inner),
            )
        )

    system = StarSystem(id="sol", name="Sol", x=0.0, y=0.0, z=0.0, planets=planets)
    logger.info(
        "Generated system {} with {} planets and {} resource nodes",
        system.name,
        len(planets),
        sum(len(p.resources) for p in planets),
    )
    return system
