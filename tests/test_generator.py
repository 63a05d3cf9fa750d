from __future__ import annotations

import random

import pytest

from starharvest.sim.generator import generate_star_system


@pytest.mark.parametrize("seed", range(40))
def test_generated_system_respects_ranges(seed: int) -> None:
    system = generate_star_system(seed=seed)

    assert 4 <= len(system.planets) <= 8
    for planet in system.planets:
        assert planet.system_id == system.id
        assert 3 <= len(planet.resources) <= 10
        for node in planet.resources:
            assert 10 <= node.amount <= 59
            assert node.depleted is False
            assert node.kind in ("mineral", "energy")


def test_same_seed_reproduces_system() -> None:
    assert generate_star_system(seed=7).to_dict() == generate_star_system(seed=7).to_dict()


def test_injected_rng_is_used() -> None:
    a = generate_star_system(rng=random.Random(99))
    b = generate_star_system(seed=99)
    assert a.to_dict() == b.to_dict()


def test_inner_orbits_never_reach_outer_orbits() -> None:
    for seed in range(40):
        system = generate_star_system(seed=seed)
        inner_count = len(system.planets) // 2
        inner = [p.orbit_radius for p in system.planets[:inner_count]]
        outer = [p.orbit_radius for p in system.planets[inner_count:]]

        assert inner == sorted(inner)
        assert outer == sorted(outer)
        assert max(inner) < min(outer)
        assert [p.orbit_index for p in system.planets] == list(range(len(system.planets)))


def test_resource_mix_is_biased_by_planet_class() -> None:
    inner_minerals = inner_total = outer_energy = outer_total = 0
    for seed in range(200):
        system = generate_star_system(seed=seed)
        inner_count = len(system.planets) // 2
        for i, planet in enumerate(system.planets):
            for node in planet.resources:
                if i < inner_count:
                    inner_total += 1
                    inner_minerals += node.kind == "mineral"
                else:
                    outer_total += 1
                    outer_energy += node.kind == "energy"

    assert 0.6 < inner_minerals / inner_total < 0.8
    assert 0.6 < outer_energy / outer_total < 0.8


def test_ids_are_unique_and_names_follow_orbit_order() -> None:
    system = generate_star_system(seed=3)
    node_ids = [n.id for p in system.planets for n in p.resources]

    assert len(node_ids) == len(set(node_ids))
    assert system.planets[0].name == "Sol A"
    assert system.planets[0].id == "planet-sol-0"
    assert system.planets[1].resources[0].id == "resource-sol-1-0"
