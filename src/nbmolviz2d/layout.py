"""Force-directed layout for the 2D molecule graph.

A small semi-implicit Euler simulation in the style of d3-force: a spring
force along links, an all-pairs charge force, and a centering force,
cooled by an ``alpha`` that decays towards ``alpha_target`` each tick.

Positions and velocities are stored on the node records themselves
(``x``, ``y``, ``vx``, ``vy``), so a caller that keeps record identity
across updates keeps the layout too. ``fx``/``fy`` pin a node.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, MutableMapping
from typing import Any

import networkx as nx
import numpy as np

from nbmolviz2d._utils import with_default
from nbmolviz2d.exceptions import SimulationConfigError

logger = logging.getLogger(__name__)

Record = MutableMapping[str, Any]
LinkAccessor = Callable[[Record], float]

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
DEFAULT_LINK_DISTANCE = 20.0
DEFAULT_LINK_STRENGTH = 1.0
DEFAULT_CHARGE_STRENGTH = -30.0
# Charge force uses sqrt(d^2) below this squared distance
DISTANCE_MIN2 = 1.0

_EVENTS = ("tick", "end")


def _default_distance(link: Record) -> float:
    return with_default(link.get("distance"), DEFAULT_LINK_DISTANCE)


def _default_strength(link: Record) -> float:
    return with_default(link.get("strength"), DEFAULT_LINK_STRENGTH)


class ForceSimulation:
    """Iterative force layout over node and link records.

    Links refer to nodes by position in the node list (``source``/``target``).
    ``step()`` advances one tick and fires ``tick`` callbacks; once ``alpha``
    drops below ``alpha_min`` it fires ``end`` and stops.

    Example:
        >>> nodes = [{"id": "a"}, {"id": "b"}]
        >>> sim = ForceSimulation(nodes).links([{"id": "ab", "source": 0, "target": 1}])
        >>> ticks = sim.center(200, 150).run()
        >>> "x" in nodes[0]
        True
    """

    def __init__(
        self,
        nodes: list[Record] | None = None,
        *,
        alpha_min: float = 0.001,
        alpha_decay: float | None = None,
        velocity_decay: float = 0.4,
        charge_strength: float = DEFAULT_CHARGE_STRENGTH,
        seed: int | None = 0,
    ) -> None:
        if not 0 < alpha_min < 1:
            raise SimulationConfigError(f"alpha_min must be in (0, 1), got {alpha_min}")
        if not 0 <= velocity_decay <= 1:
            raise SimulationConfigError(f"velocity_decay must be in [0, 1], got {velocity_decay}")

        self.alpha_min = alpha_min
        self.alpha_decay = alpha_decay if alpha_decay is not None else 1 - alpha_min ** (1 / 300)
        self.velocity_decay = velocity_decay
        self.charge_strength = charge_strength
        self.alpha_target = 0.0
        self._alpha = 1.0
        self._center: tuple[float, float] | None = None
        self._rng = np.random.default_rng(seed)

        self._nodes: list[Record] = []
        self._links: list[Record] = []
        self._distance: LinkAccessor = _default_distance
        self._strength: LinkAccessor = _default_strength
        self._bias = np.zeros(0)
        self._handlers: dict[str, list[Callable[[], None]]] = {name: [] for name in _EVENTS}
        self._running = True
        self._task: asyncio.Task | None = None
        self._interval: float | None = None
        self.ticks = 0

        if nodes is not None:
            self.nodes(nodes)

    # -- configuration -----------------------------------------------------

    def nodes(self, nodes: list[Record]) -> ForceSimulation:
        """Bind node records, placing any without a position on a phyllotaxis spiral."""
        self._nodes = nodes
        for i, node in enumerate(nodes):
            node["index"] = i
            if node.get("fx") is not None:
                node["x"] = node["fx"]
            if node.get("fy") is not None:
                node["y"] = node["fy"]
            x, y = node.get("x"), node.get("y")
            if x is None or y is None or math.isnan(x) or math.isnan(y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                node["x"] = radius * math.cos(angle)
                node["y"] = radius * math.sin(angle)
            if node.get("vx") is None or node.get("vy") is None:
                node["vx"] = 0.0
                node["vy"] = 0.0
        if self._links:
            self._init_links()
        return self

    def links(
        self,
        links: list[Record],
        *,
        distance: LinkAccessor | None = None,
        strength: LinkAccessor | None = None,
    ) -> ForceSimulation:
        """Bind link records. ``distance``/``strength`` read per-link settings."""
        self._links = links
        if distance is not None:
            self._distance = distance
        if strength is not None:
            self._strength = strength
        self._init_links()
        return self

    def center(self, x: float, y: float) -> ForceSimulation:
        self._center = (x, y)
        return self

    def _init_links(self) -> None:
        n = len(self._nodes)
        G = nx.MultiGraph()
        G.add_nodes_from(range(n))
        for link in self._links:
            s, t = link.get("source"), link.get("target")
            for end in (s, t):
                if not isinstance(end, int) or not 0 <= end < n:
                    raise SimulationConfigError(
                        f"Link {link.get('id')!r} endpoint {end!r} is not a node position in [0, {n})"
                    )
            G.add_edge(s, t)
        # Each end moves in proportion to the other end's share of connections
        self._bias = np.array(
            [G.degree(link["source"]) / (G.degree(link["source"]) + G.degree(link["target"])) for link in self._links]
        )

    def on(self, event: str, callback: Callable[[], None] | None) -> ForceSimulation:
        """Register (or with None, clear) callbacks for ``tick`` or ``end``."""
        if event not in self._handlers:
            raise SimulationConfigError(f"Unknown simulation event {event!r}; expected one of {_EVENTS}")
        if callback is None:
            self._handlers[event].clear()
        else:
            self._handlers[event].append(callback)
        return self

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        if not 0 <= value <= 1:
            raise SimulationConfigError(f"alpha must be in [0, 1], got {value}")
        self._alpha = value

    @property
    def running(self) -> bool:
        return self._running

    # -- physics -----------------------------------------------------------

    def tick(self, iterations: int = 1) -> ForceSimulation:
        """Advance the physics without firing callbacks."""
        for _ in range(iterations):
            self._alpha += (self.alpha_target - self._alpha) * self.alpha_decay
            if not self._nodes:
                continue
            pos = np.array([[n["x"], n["y"]] for n in self._nodes], dtype=float)
            vel = np.array([[n["vx"], n["vy"]] for n in self._nodes], dtype=float)

            if self._links:
                self._apply_links(pos, vel)
            if self.charge_strength and len(self._nodes) > 1:
                self._apply_charge(pos, vel)
            if self._center is not None:
                pos -= pos.mean(axis=0) - np.asarray(self._center)

            vel *= 1 - self.velocity_decay
            pos += vel
            self._write_back(pos, vel)
        return self

    def _apply_links(self, pos: np.ndarray, vel: np.ndarray) -> None:
        src = np.array([link["source"] for link in self._links])
        tgt = np.array([link["target"] for link in self._links])
        distance = np.array([self._distance(link) for link in self._links], dtype=float)
        strength = np.array([self._strength(link) for link in self._links], dtype=float)

        delta = (pos[tgt] + vel[tgt]) - (pos[src] + vel[src])
        zero = ~delta.any(axis=1)
        if zero.any():
            delta[zero] = (self._rng.random((int(zero.sum()), 2)) - 0.5) * 1e-6
        length = np.hypot(delta[:, 0], delta[:, 1])
        scale = (length - distance) / length * self._alpha * strength
        delta *= scale[:, None]

        np.add.at(vel, tgt, -delta * self._bias[:, None])
        np.add.at(vel, src, delta * (1 - self._bias)[:, None])

    def _apply_charge(self, pos: np.ndarray, vel: np.ndarray) -> None:
        # delta[i, j] points from node i to node j
        delta = pos[None, :, :] - pos[:, None, :]
        dist2 = (delta**2).sum(axis=-1)
        np.fill_diagonal(dist2, np.inf)
        near = dist2 < DISTANCE_MIN2
        dist2 = np.where(near, np.sqrt(np.maximum(dist2 * DISTANCE_MIN2, 1e-12)), dist2)
        weight = self.charge_strength * self._alpha / dist2
        vel += (delta * weight[..., None]).sum(axis=1)

    def _write_back(self, pos: np.ndarray, vel: np.ndarray) -> None:
        for node, (x, y), (vx, vy) in zip(self._nodes, pos.tolist(), vel.tolist()):
            if node.get("fx") is not None:
                x, vx = node["fx"], 0.0
            if node.get("fy") is not None:
                y, vy = node["fy"], 0.0
            node["x"], node["y"], node["vx"], node["vy"] = x, y, vx, vy

    # -- tick loop ---------------------------------------------------------

    def _emit(self, event: str) -> None:
        for callback in list(self._handlers[event]):
            callback()

    def step(self) -> bool:
        """Tick once and fire ``tick``. Returns False once the layout has settled.

        The settle check comes after the tick, so a restarted simulation
        whose ``alpha_target`` was raised warms up instead of ending at once.
        """
        if not self._running:
            return False
        self.tick()
        self.ticks += 1
        self._emit("tick")
        if self._alpha < self.alpha_min:
            self._finish()
            return False
        return True

    def _finish(self) -> None:
        self._running = False
        self._emit("end")

    def run(self, max_ticks: int | None = None) -> int:
        """Tick until settled (or ``max_ticks``). Returns the number of ticks run."""
        start = self.ticks
        while self.step():
            if max_ticks is not None and self.ticks - start >= max_ticks:
                break
        return self.ticks - start

    async def run_async(self, interval: float = 1 / 60, max_ticks: int | None = None) -> int:
        """Like ``run`` but yields to the event loop between ticks."""
        start = self.ticks
        while self.step():
            if max_ticks is not None and self.ticks - start >= max_ticks:
                break
            await asyncio.sleep(interval)
        return self.ticks - start

    def restart(self, alpha: float | None = None) -> ForceSimulation:
        """Resume ticking, optionally reheating to ``alpha``.

        A simulation that was animating on the event loop starts a new
        background task once the previous one has finished.
        """
        if alpha is not None:
            self.alpha = alpha
        self._running = True
        if self._interval is not None and (self._task is None or self._task.done()):
            self.start_background(self._interval)
        return self

    def stop(self) -> ForceSimulation:
        """Stop ticking without firing ``end``."""
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        return self

    def start_background(self, interval: float = 1 / 60) -> asyncio.Task | None:
        """Tick on the running event loop, as a notebook kernel does.

        Returns None when no loop is running; the caller then drives ticks
        with ``run`` or ``step``.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, layout will not animate")
            return None
        self._interval = interval
        self._task = loop.create_task(self.run_async(interval))
        self._task.add_done_callback(self._on_task_done)
        return self._task

    @staticmethod
    def _on_task_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background layout stopped after an error: %s", exc, exc_info=exc)
