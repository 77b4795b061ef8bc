"""Turn raw floor-sensor codes and ultrasonic distances into cell verdicts."""

from .config import OBSTACLE_COLORS, TRAVERSABLE_COLORS
from .errors import ConfigError
from .grid import OBSTACLE, TRAVERSABLE

INDETERMINATE = -1

COLOR_NAMES = ("?", "BLACK", "BLUE", "GREEN", "YELLOW", "RED", "WHITE", "BROWN")
VERDICT_NAMES = {TRAVERSABLE: "traversable", OBSTACLE: "obstacle", INDETERMINATE: "indeterminate"}


def color_name(code):
    if isinstance(code, int) and 0 <= code < len(COLOR_NAMES):
        return COLOR_NAMES[code]
    return COLOR_NAMES[0]


class ObstacleClassifier:
    """
    Fixed mapping from colour code to verdict for the duration of a run.
    Codes outside both sets, and failed reads (None), are indeterminate.
    """

    def __init__(self, obstacle_colors=OBSTACLE_COLORS, traversable_colors=TRAVERSABLE_COLORS,
                 wall_threshold_mm=None):
        self.obstacle_colors = frozenset(obstacle_colors)
        self.traversable_colors = frozenset(traversable_colors)
        if self.obstacle_colors & self.traversable_colors:
            raise ConfigError("obstacle and traversable colour sets overlap")
        self.wall_threshold_mm = wall_threshold_mm

    @classmethod
    def from_config(cls, config):
        return cls(config.obstacle_colors, config.traversable_colors, config.wall_threshold_mm)

    def classify(self, code):
        if code is None or isinstance(code, bool):
            return INDETERMINATE
        if code in self.obstacle_colors:
            return OBSTACLE
        if code in self.traversable_colors:
            return TRAVERSABLE
        return INDETERMINATE

    def classify_distance(self, distance_mm):
        """Ultrasonic look-ahead: closer than the wall threshold means the next cell is blocked."""
        if self.wall_threshold_mm is None or distance_mm is None or distance_mm <= 0:
            return INDETERMINATE
        return OBSTACLE if distance_mm < self.wall_threshold_mm else TRAVERSABLE
