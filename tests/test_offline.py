from __future__ import annotations

from conftest import NOW, make_world

from starharvest.sim.entities import Robot
from starharvest.sim.offline import offline_yield, reconcile_offline

TWO_HOURS = 7_200_000


def _gatherer(robot_id: str, resource_id: str, efficiency: int) -> Robot:
    return Robot(
        id=robot_id,
        name=robot_id,
        x=0.0,
        y=0.0,
        z=0.0,
        task="gathering",
        efficiency=efficiency,
        last_harvest_time=0,
        assigned_resource_id=resource_id,
    )


def test_two_hours_offline_yields_closed_form_amount() -> None:
    world = make_world()
    robot = _gatherer("robot-1", "gas-1", efficiency=3)

    report = reconcile_offline([robot], world, last_visit=NOW - TWO_HOURS, now=NOW)

    node = world.find_resource("gas-1")
    assert report.applied is True
    assert report.energy_gained == 60
    assert report.minerals_gained == 0
    assert node.amount == 40
    assert node.depleted is False


def test_offline_yield_is_capped_at_node_amount() -> None:
    world = make_world()
    robot = _gatherer("robot-1", "ore-2", efficiency=5)

    report = reconcile_offline([robot], world, last_visit=NOW - TWO_HOURS, now=NOW)

    node = world.find_resource("ore-2")
    assert report.minerals_gained == 12
    assert node.amount == 0
    assert node.depleted is True
    # robots are left for the next frame to idle
    assert robot.task == "gathering"


def test_short_absence_is_not_reconciled() -> None:
    world = make_world()
    robot = _gatherer("robot-1", "gas-1", efficiency=3)

    report = reconcile_offline([robot], world, last_visit=NOW - 30_000, now=NOW)

    assert report.applied is False
    assert report.gains == {}
    assert world.find_resource("gas-1").amount == 100


def test_two_robots_on_one_node_share_its_remaining_amount() -> None:
    world = make_world()
    robots = [_gatherer("robot-1", "ore-2", 1), _gatherer("robot-2", "ore-2", 1)]

    report = reconcile_offline(robots, world, last_visit=NOW - 3_600_000, now=NOW)

    assert report.minerals_gained == 12
    assert world.find_resource("ore-2").depleted is True


def test_idle_missing_and_depleted_targets_are_skipped() -> None:
    world = make_world()
    world.find_resource("ore-2").take(100)
    idle = _gatherer("robot-1", "ore-1", 2)
    idle.task = "idle"
    robots = [idle, _gatherer("robot-2", "ore-404", 2), _gatherer("robot-3", "ore-2", 2)]

    report = reconcile_offline(robots, world, last_visit=NOW - TWO_HOURS, now=NOW)

    assert report.applied is True
    assert report.gains == {}
    assert world.find_resource("ore-1").amount == 50


def test_offline_yield_floors_partial_units() -> None:
    assert offline_yield(1, 60_000, 10) == 0
    assert offline_yield(1, 360_000, 10) == 1
    assert offline_yield(2, 90 * 60_000, 10) == 30
