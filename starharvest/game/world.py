import asyncio
import time
from typing import Callable, Optional

from loguru import logger

from starharvest.game.db import StateStore
from starharvest.sim.generator import generate_star_system
from starharvest.sim.session import Session, SessionConfig


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class World:
    """
    Live runtime around a Session.

    start() generates the world, loads saved state, reconciles offline
    progress, then ticks the session every tick_dt seconds. lastVisit is
    checkpointed every autosave_dt seconds and once more on stop().
    Callers touching the session from request handlers hold `lock`.
    """

    def __init__(
        self,
        store: StateStore,
        seed: Optional[int] = None,
        tick_dt: float = 0.1,
        autosave_dt: float = 20.0,
        cfg: SessionConfig | None = None,
        clock: Callable[[], int] = wall_clock_ms,
    ):
        self.store = store
        self.seed = seed
        self.tick_dt = tick_dt
        self.autosave_dt = autosave_dt
        self.cfg = cfg
        self.clock = clock

        self.session: Optional[Session] = None

        # Background task control
        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._last_autosave: float = 0.0
        self._last_tick_ms: int = 0

        self.lock = asyncio.Lock()

    def load(self) -> Session:
        self.store.init_db()
        world = generate_star_system(seed=self.seed)
        self.session = Session(self.store, world, now=self.clock(), cfg=self.cfg)
        logger.info(
            "Loaded save: {} robots, inventory {}",
            len(self.session.robots),
            self.session.inventory.to_dict(),
        )
        return self.session

    def require_session(self) -> Session:
        if self.session is None:
            raise RuntimeError("World.load() has not run")
        return self.session

    async def start(self) -> None:
        """Load if needed, reconcile offline progress, then start ticking."""
        if self.session is None:
            self.load()

        now = self.clock()
        async with self.lock:
            self.require_session().resume(now)
        self._last_tick_ms = now
        self._last_autosave = time.monotonic()

        self._stop.clear()
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Stop the tick loop and checkpoint once."""
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

        if self.session is not None:
            async with self.lock:
                self.session.checkpoint(self.clock())

    def step(self) -> None:
        """Run one frame at the current clock time."""
        session = self.require_session()
        now = self.clock()
        dt = max(0.0, (now - self._last_tick_ms) / 1000.0)
        self._last_tick_ms = now
        session.tick(now, dt)

        if (time.monotonic() - self._last_autosave) >= self.autosave_dt:
            session.checkpoint(now)
            self._last_autosave = time.monotonic()

    async def _run_loop(self) -> None:
        next_wall = time.monotonic()
        while not self._stop.is_set():
            next_wall += self.tick_dt
            sleep_for = max(0.0, next_wall - time.monotonic())

            try:
                # wait either until stop is set, or timeout for the next tick
                await asyncio.wait_for(self._stop.wait(), timeout=sleep_for)
                break
            except asyncio.TimeoutError:
                pass

            async with self.lock:
                try:
                    self.step()
                except Exception:
                    logger.exception("Simulation step failed, continuing with next tick")
