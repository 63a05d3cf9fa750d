# starharvest/app.py
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Tuple

import uvicorn
from fastapi import Body, FastAPI, HTTPException, Request
from loguru import logger

from starharvest.config import Settings, configure_logging, settings as default_settings
from starharvest.game.db import StateStore
from starharvest.game.world import World, wall_clock_ms


def _vec3(payload: Dict[str, Any]) -> Tuple[float, float, float]:
    try:
        return float(payload["x"]), float(payload["y"]), float(payload["z"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="position_required")


def _required_str(payload: Dict[str, Any], key: str) -> str:
    value = str(payload.get(key) or "").strip()
    if not value:
        raise HTTPException(status_code=400, detail=f"{key}_required")
    return value


def create_app(settings: Settings | None = None, clock: Callable[[], int] = wall_clock_ms) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    world = World(
        StateStore(settings.db_path),
        seed=settings.world_seed,
        tick_dt=settings.tick_dt,
        autosave_dt=settings.autosave_dt,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await world.start()
        logger.info("Star Harvest running (db={})", settings.db_path)
        yield
        await world.stop()
        logger.info("Star Harvest shut down cleanly")

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.world = world

    def get_world(request: Request) -> World:
        return request.app.state.world

    # ----------------------------
    # Read side
    # ----------------------------

    @app.get("/api/state")
    async def api_state(request: Request):
        w = get_world(request)
        async with w.lock:
            return {"ok": True, "state": w.require_session().snapshot()}

    @app.get("/api/robots/{robot_id}")
    async def api_robot(robot_id: str, request: Request):
        w = get_world(request)
        async with w.lock:
            session = w.require_session()
            robot = session.robots.get(robot_id)
            if robot is None:
                raise HTTPException(status_code=404, detail="robot_not_found")
            return {"ok": True, "robot": robot.to_dict(), "upgrade_cost": session.upgrade_cost(robot_id)}

    # ----------------------------
    # Navigation
    # ----------------------------

    @app.post("/api/navigation/land")
    async def api_land(request: Request, payload: dict = Body(...)):
        planet_id = _required_str(payload, "planet_id")
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().land_on_planet(planet_id)
        return {"ok": True, "applied": applied}

    @app.post("/api/navigation/return")
    async def api_return(request: Request):
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().return_to_space()
        return {"ok": True, "applied": applied}

    @app.post("/api/navigation/system")
    async def api_select_system(request: Request, payload: dict = Body(...)):
        system_id = payload.get("system_id")
        if system_id is not None and not isinstance(system_id, str):
            raise HTTPException(status_code=400, detail="system_id_must_be_string_or_null")
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().set_current_system(system_id)
        return {"ok": True, "applied": applied}

    @app.post("/api/navigation/player_position")
    async def api_player_position(request: Request, payload: dict = Body(...)):
        x, y, z = _vec3(payload)
        w = get_world(request)
        async with w.lock:
            w.require_session().set_player_position(x, y, z)
        return {"ok": True}

    @app.post("/api/navigation/surface_position")
    async def api_surface_position(request: Request, payload: dict = Body(...)):
        x, y, z = _vec3(payload)
        w = get_world(request)
        async with w.lock:
            w.require_session().set_surface_position(x, y, z)
        return {"ok": True}

    # ----------------------------
    # Robots & harvesting
    # ----------------------------

    @app.post("/api/robots")
    async def api_create_robot(request: Request, payload: dict = Body(...)):
        x, y, z = _vec3(payload)
        w = get_world(request)
        async with w.lock:
            robot = w.require_session().create_robot(x, y, z, w.clock())
        return {"ok": True, "robot": robot.to_dict()}

    @app.post("/api/robots/{robot_id}/assign")
    async def api_assign_robot(robot_id: str, request: Request, payload: dict = Body(...)):
        resource_id = _required_str(payload, "resource_id")
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().assign_robot(robot_id, resource_id)
        return {"ok": True, "applied": applied}

    @app.post("/api/robots/{robot_id}/upgrade")
    async def api_upgrade_robot(robot_id: str, request: Request):
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().upgrade_robot(robot_id)
        return {"ok": True, "applied": applied}

    @app.post("/api/resources/{resource_id}/harvest")
    async def api_harvest(resource_id: str, request: Request):
        w = get_world(request)
        async with w.lock:
            applied = w.require_session().harvest_resource(resource_id, w.clock())
        return {"ok": True, "applied": applied}

    return app


def main() -> None:
    app = create_app()
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    main()
