from dataclasses import dataclass, field
from typing import Any, List, Tuple

from loguru import logger


class Display:
    """Passive consumer of world-state changes. Every hook is fire-and-forget."""

    def on_position_update(self, x: float, y: float, heading: float) -> None:
        pass

    def on_obstacle_added(self, x: float, y: float, size_x: float, size_y: float) -> None:
        pass

    def on_positioned_changed(self, positioned: bool) -> None:
        pass

    def on_trail_toggled(self, enabled: bool) -> None:
        pass


@dataclass
class RecordingDisplay(Display):
    """Keeps every notification plus the path history a renderer would draw."""
    events: List[Tuple[str, Tuple[Any, ...]]] = field(default_factory=list)
    path: List[Tuple[float, float]] = field(default_factory=list)
    positioned: bool = False
    trail: bool = False

    def on_position_update(self, x, y, heading):
        self.events.append(("position", (x, y, heading)))
        self.path.append((x, y))

    def on_obstacle_added(self, x, y, size_x, size_y):
        self.events.append(("obstacle", (x, y, size_x, size_y)))

    def on_positioned_changed(self, positioned):
        self.events.append(("positioned", (positioned,)))
        self.positioned = positioned

    def on_trail_toggled(self, enabled):
        self.events.append(("trail", (enabled,)))
        self.trail = enabled


class LogDisplay(Display):
    def on_position_update(self, x, y, heading):
        logger.info("robot at x={:.3f} y={:.3f} heading={:.1f}", x, y, heading)

    def on_obstacle_added(self, x, y, size_x, size_y):
        logger.info("obstacle at x={} y={} size={}x{}", x, y, size_x, size_y)

    def on_positioned_changed(self, positioned):
        logger.info("robot positioned={}", positioned)

    def on_trail_toggled(self, enabled):
        logger.info("trail {}", "on" if enabled else "off")
