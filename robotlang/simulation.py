"""World state of the robot simulation.

The arena is the square [0, env_size] x [0, env_size]. The robot is a disk of
``robot_radius``; a pose is valid only when the disk plus ``margin`` lies
inside the arena. Obstacles are axis-aligned rectangles given by center and
full extents.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from .config import SimulationConfig
from .display import Display
from .errors import SimulationError
from .types import to_f32

SENSOR_COUNT = 8
SENSOR_STEP_DEG = 45.0


@dataclass(frozen=True)
class Obstacle:
    x: float
    y: float
    size_x: float
    size_y: float


@dataclass
class Pose:
    x: float = -1.0
    y: float = -1.0
    heading: float = 0.0


class ObstacleModel(BaseModel):
    x: float
    y: float
    size_x: float
    size_y: float


class WorldSnapshot(BaseModel):
    """Read-only copy of the world handed to consumers outside the evaluator."""
    positioned: bool
    x: float
    y: float
    heading: float
    trail_enabled: bool
    obstacles: List[ObstacleModel] = Field(default_factory=list)
    path: List[Tuple[float, float]] = Field(default_factory=list)


def normalize_heading(deg: float) -> float:
    h = to_f32(deg % 360.0)
    # tiny negative inputs can round up to exactly 360
    return 0.0 if h >= 360.0 else h


def intersects(x: float, y: float, radius: float, obs: Obstacle) -> bool:
    """Disk centered at (x, y) against an axis-aligned rectangle."""
    half_x = obs.size_x / 2.0
    half_y = obs.size_y / 2.0
    dx = abs(x - obs.x)
    dy = abs(y - obs.y)
    if dx > half_x + radius or dy > half_y + radius:
        return False
    if dx <= half_x or dy <= half_y:
        return True
    corner_sq = (dx - half_x) ** 2 + (dy - half_y) ** 2
    return corner_sq <= radius ** 2


class World:
    def __init__(self, config: Optional[SimulationConfig] = None, display: Optional[Display] = None):
        self.config = config or SimulationConfig()
        self.display = display or Display()
        self.pose = Pose()
        self.positioned = False
        self.trail_enabled = False
        self.obstacles: List[Obstacle] = []
        self.path: List[Tuple[float, float]] = []

    # ---------- geometry ----------
    def is_valid_position(self, x: float, y: float) -> bool:
        reach = self.config.robot_radius + self.config.margin
        size = self.config.env_size
        return (x - reach) >= 0.0 and (x + reach) <= size and (y - reach) >= 0.0 and (y + reach) <= size

    def collides(self, x: float, y: float) -> bool:
        r = self.config.robot_radius
        return any(intersects(x, y, r, obs) for obs in self.obstacles)

    def is_blocked(self, x: float, y: float) -> bool:
        return not self.is_valid_position(x, y) or self.collides(x, y)

    def require_positioned(self) -> None:
        if not self.positioned:
            raise SimulationError("robot is not positioned yet")

    def _commit(self, x: float, y: float, heading: float) -> None:
        x, y, heading = to_f32(x), to_f32(y), to_f32(heading)
        self.pose = Pose(x, y, heading)
        self.path.append((x, y))
        self.display.on_position_update(x, y, heading)

    # ---------- operations ----------
    def set_pose(self, x: float, y: float, heading: float) -> bool:
        """Place the robot. Returns True on the first successful placement."""
        x, y, heading = to_f32(x), to_f32(y), normalize_heading(heading)
        if not self.is_valid_position(x, y):
            raise SimulationError("Position out of bounds")
        first = not self.positioned
        self._commit(x, y, heading)
        if first:
            self.positioned = True
            self.display.on_positioned_changed(True)
        logger.debug("rSet -> ({}, {}, {})", x, y, heading)
        return first

    def move(self, dist: float) -> None:
        """Advance along the heading in steps of ``config.speed``.

        Stops when the distance is covered or the next step would collide or
        leave the arena; blocked positions are never committed.
        """
        self.require_positioned()
        rad = math.radians(self.pose.heading)
        cos_h, sin_h = math.cos(rad), math.sin(rad)
        direction = 1.0 if dist >= 0.0 else -1.0
        remaining = abs(dist)
        x, y = self.pose.x, self.pose.y
        steps = 0
        while remaining > 0.0:
            step = min(self.config.speed, remaining) * direction
            # checked in single precision, the value _commit stores
            nx = to_f32(x + step * cos_h)
            ny = to_f32(y + step * sin_h)
            if self.is_blocked(nx, ny):
                logger.debug("rMove stopped after {} step(s) at ({}, {})", steps, x, y)
                break
            x, y = nx, ny
            remaining -= abs(step)
            steps += 1
        self._commit(x, y, self.pose.heading)

    def turn(self, delta: float) -> None:
        self.require_positioned()
        self._commit(self.pose.x, self.pose.y, normalize_heading(self.pose.heading + delta))

    def add_obstacle(self, x: float, y: float, size_x: float, size_y: float) -> Obstacle:
        x, y, size_x, size_y = to_f32(x), to_f32(y), to_f32(size_x), to_f32(size_y)
        obs = Obstacle(x, y, size_x, size_y)
        if self.positioned and intersects(self.pose.x, self.pose.y, self.config.robot_radius, obs):
            raise SimulationError("obstacle overlaps with robot")
        size = self.config.env_size
        if (x - size_x / 2.0) < 0.0 or (x + size_x / 2.0) > size \
                or (y - size_y / 2.0) < 0.0 or (y + size_y / 2.0) > size:
            raise SimulationError("obstacle out of bounds")
        self.obstacles.append(obs)
        self.display.on_obstacle_added(x, y, size_x, size_y)
        return obs

    def set_trail(self, enabled: bool) -> None:
        self.trail_enabled = enabled
        self.display.on_trail_toggled(enabled)

    def feel(self, sensor: int) -> bool:
        """Read one of the eight sensors; the pose is never changed."""
        self.require_positioned()
        if sensor < 0 or sensor >= SENSOR_COUNT:
            raise SimulationError("incorrect sensor number")
        rad = math.radians(self.pose.heading + SENSOR_STEP_DEG * sensor)
        px = self.pose.x + self.config.sensor_range * math.cos(rad)
        py = self.pose.y + self.config.sensor_range * math.sin(rad)
        return self.is_blocked(px, py)

    def x_position(self) -> float:
        self.require_positioned()
        return self.pose.x

    def y_position(self) -> float:
        self.require_positioned()
        return self.pose.y

    def rotation(self) -> float:
        self.require_positioned()
        return self.pose.heading

    def snapshot(self) -> WorldSnapshot:
        return WorldSnapshot(
            positioned=self.positioned,
            x=self.pose.x,
            y=self.pose.y,
            heading=self.pose.heading,
            trail_enabled=self.trail_enabled,
            obstacles=[ObstacleModel(x=o.x, y=o.y, size_x=o.size_x, size_y=o.size_y) for o in self.obstacles],
            path=list(self.path),
        )
