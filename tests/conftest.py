from __future__ import annotations

from pathlib import Path

import pytest

from starharvest.game.db import StateStore
from starharvest.sim.bodies import Planet, ResourceNode, StarSystem
from starharvest.sim.session import Session

NOW = 1_700_000_000_000


def make_world() -> StarSystem:
    rocky = Planet(
        id="planet-a",
        name="Test A",
        system_id="test",
        orbit_index=0,
        orbit_radius=200.0,
        radius=1.0,
        color="#8B4513",
        resources=[
            ResourceNode(id="ore-1", kind="mineral", x=0.0, y=0.0, z=0.0, amount=50),
            ResourceNode(id="ore-2", kind="mineral", x=4.0, y=0.5, z=3.0, amount=12),
        ],
    )
    gas = Planet(
        id="planet-b",
        name="Test B",
        system_id="test",
        orbit_index=1,
        orbit_radius=1000.0,
        radius=3.0,
        color="#4169E1",
        resources=[
            ResourceNode(id="gas-1", kind="energy", x=1.0, y=0.0, z=1.0, amount=100),
        ],
    )
    return StarSystem(id="test", name="Test", x=0.0, y=0.0, z=0.0, planets=[rocky, gas])


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    s = StateStore(tmp_path / "game.db")
    s.init_db()
    return s


@pytest.fixture
def world() -> StarSystem:
    return make_world()


@pytest.fixture
def session(store: StateStore, world: StarSystem) -> Session:
    return Session(store, world, now=NOW)


def save_raw(store: StateStore, key: str, value_json: str) -> None:
    """Write a record's text as-is, bypassing json.dumps."""
    with store.get_conn() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO kv_state (key, value_json, updated_at) VALUES (?, ?, ?)",
            (key, value_json, 0.0),
        )
    conn.close()
