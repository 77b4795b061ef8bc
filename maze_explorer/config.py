# -*- coding:utf-8 -*-
"""
config.py
- Defaults for the maze run (adjust to the real field)
- MazeConfig: validated run configuration, loadable from a JSON file
"""

import json
import logging

from .errors import ConfigError
from .pose import HEADING_NAMES, NORTH, parse_heading

logger = logging.getLogger(__name__)

# ================== CONFIG (adjust to the real field) ==================
GRID_ROWS, GRID_COLS = 4, 4       # maze size in cells
START_XY = (0, 0)                 # start cell (x, y)
START_HEADING = NORTH             # 0=N, 1=E, 2=S, 3=W
GOAL_XY = None                    # None = opposite corner

# EV3 colour codes: 0=?, 1=BLACK, 2=BLUE, 3=GREEN, 4=YELLOW, 5=RED, 6=WHITE, 7=BROWN
OBSTACLE_COLORS = (1, 5)
TRAVERSABLE_COLORS = (6, 7)

TIE_BREAK = "right"               # "right" | "random"
INDETERMINATE_POLICY = "traversable"  # "traversable" | "skip"
SENSOR_RETRIES = 2                # extra reads while a code is indeterminate
MOVE_RETRIES = 3                  # failed moves tolerated per target cell

# Calibration handed to the executor (opaque to the drivers)
CELL_LENGTH_M = 0.253             # one tile
RETURN_LENGTH_M = 0.070           # back-off after driving onto an obstacle, < one tile
TURN_SPEED_DPS = 90.0
WALL_THRESHOLD_MM = None          # ultrasonic look-ahead; None disables it
HEADING_TOLERANCE_DEG = 15.0      # gyro drift that gets reported

# Sensor adaptor ADC -> colour code: (upper bound exclusive, code), ascending
ADC_COLOR_BANDS = ((150, 1), (300, 5), (700, 7), (1024, 6))

TIE_BREAKS = ("right", "random")
INDETERMINATE_POLICIES = ("traversable", "skip")


def _as_xy(value, name):
    try:
        x, y = value
        return int(x), int(y)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an (x, y) pair, got {value!r}") from None


def _as_codes(value, name):
    try:
        return frozenset(int(v) for v in value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a list of integer colour codes") from None


class MazeConfig:
    """Run configuration consumed by the session and both drivers."""

    def __init__(self, rows=GRID_ROWS, cols=GRID_COLS, start=START_XY,
                 start_heading=START_HEADING, goal=GOAL_XY,
                 obstacle_colors=OBSTACLE_COLORS, traversable_colors=TRAVERSABLE_COLORS,
                 tie_break=TIE_BREAK, seed=None,
                 indeterminate_policy=INDETERMINATE_POLICY,
                 sensor_retries=SENSOR_RETRIES, move_retries=MOVE_RETRIES,
                 max_steps=None, cell_length_m=CELL_LENGTH_M,
                 return_length_m=RETURN_LENGTH_M, turn_speed_dps=TURN_SPEED_DPS,
                 wall_threshold_mm=WALL_THRESHOLD_MM,
                 heading_tolerance_deg=HEADING_TOLERANCE_DEG,
                 known_obstacles=(), sense_cells=True,
                 adc_color_bands=ADC_COLOR_BANDS):
        try:
            self.rows, self.cols = int(rows), int(cols)
        except (TypeError, ValueError):
            raise ConfigError(f"rows/cols must be integers, got {rows!r}x{cols!r}") from None
        if self.rows <= 0 or self.cols <= 0:
            raise ConfigError(f"grid must be at least 1x1, got {self.cols}x{self.rows}")

        self.start = _as_xy(start, "start")
        try:
            self.start_heading = parse_heading(start_heading)
        except ValueError as e:
            raise ConfigError(str(e)) from None
        self.goal = (self.cols - 1, self.rows - 1) if goal is None else _as_xy(goal, "goal")

        self.obstacle_colors = _as_codes(obstacle_colors, "obstacle_colors")
        self.traversable_colors = _as_codes(traversable_colors, "traversable_colors")

        self.tie_break = str(tie_break).lower()
        self.seed = seed
        self.indeterminate_policy = str(indeterminate_policy).lower()
        self.sensor_retries = int(sensor_retries)
        self.move_retries = int(move_retries)
        self.max_steps = None if max_steps is None else int(max_steps)

        self.cell_length_m = float(cell_length_m)
        self.return_length_m = float(return_length_m)
        self.turn_speed_dps = float(turn_speed_dps)
        self.wall_threshold_mm = None if wall_threshold_mm is None else float(wall_threshold_mm)
        self.heading_tolerance_deg = float(heading_tolerance_deg)
        self.known_obstacles = tuple(_as_xy(p, "known_obstacles") for p in known_obstacles)
        self.sense_cells = bool(sense_cells)
        self.adc_color_bands = tuple((int(b), int(c)) for b, c in adc_color_bands)

        self.validate()

    # ----- Validation -----
    def in_bounds(self, pos):
        return 0 <= pos[0] < self.cols and 0 <= pos[1] < self.rows

    def validate(self):
        for name, pos in (("start", self.start), ("goal", self.goal)):
            if not self.in_bounds(pos):
                raise ConfigError(f"{name} {pos} outside {self.cols}x{self.rows} grid")
        for pos in self.known_obstacles:
            if not self.in_bounds(pos):
                raise ConfigError(f"known obstacle {pos} outside {self.cols}x{self.rows} grid")
        if self.start in self.known_obstacles:
            raise ConfigError(f"start {self.start} is a known obstacle")
        overlap = self.obstacle_colors & self.traversable_colors
        if overlap:
            raise ConfigError(f"colour codes {sorted(overlap)} are both obstacle and traversable")
        if self.tie_break not in TIE_BREAKS:
            raise ConfigError(f"tie_break must be one of {TIE_BREAKS}, got {self.tie_break!r}")
        if self.indeterminate_policy not in INDETERMINATE_POLICIES:
            raise ConfigError(f"indeterminate_policy must be one of {INDETERMINATE_POLICIES}, "
                              f"got {self.indeterminate_policy!r}")
        if self.sensor_retries < 0 or self.move_retries < 1:
            raise ConfigError("sensor_retries must be >= 0 and move_retries >= 1")
        if self.max_steps is not None and self.max_steps <= 0:
            raise ConfigError("max_steps must be positive")
        if not 0 < self.return_length_m < self.cell_length_m:
            raise ConfigError("return_length_m must be positive and shorter than cell_length_m")
        bounds = [b for b, _ in self.adc_color_bands]
        if bounds != sorted(bounds):
            raise ConfigError("adc_color_bands must be sorted by upper bound")

    @property
    def step_budget(self):
        if self.max_steps is not None:
            return self.max_steps
        return 4 * self.rows * self.cols * (self.move_retries + 1)

    # ----- Loading -----
    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        if "grid" in data:
            rows, cols = data.pop("grid")
            data.setdefault("rows", rows)
            data.setdefault("cols", cols)
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"bad configuration keys: {e}") from None

    @classmethod
    def load(cls, path):
        return cls.from_dict(read_config_file(path))

    def replace(self, **changes):
        data = self.to_dict()
        data.update(changes)
        return MazeConfig.from_dict(data)

    def to_dict(self):
        return {
            "rows": self.rows, "cols": self.cols,
            "start": list(self.start),
            "start_heading": HEADING_NAMES[self.start_heading],
            "goal": list(self.goal),
            "obstacle_colors": sorted(self.obstacle_colors),
            "traversable_colors": sorted(self.traversable_colors),
            "tie_break": self.tie_break, "seed": self.seed,
            "indeterminate_policy": self.indeterminate_policy,
            "sensor_retries": self.sensor_retries, "move_retries": self.move_retries,
            "max_steps": self.max_steps,
            "cell_length_m": self.cell_length_m, "return_length_m": self.return_length_m,
            "turn_speed_dps": self.turn_speed_dps,
            "wall_threshold_mm": self.wall_threshold_mm,
            "heading_tolerance_deg": self.heading_tolerance_deg,
            "known_obstacles": [list(p) for p in self.known_obstacles],
            "sense_cells": self.sense_cells,
            "adc_color_bands": [list(b) for b in self.adc_color_bands],
        }

    def __repr__(self):
        return (f"MazeConfig({self.cols}x{self.rows}, start={self.start}, "
                f"goal={self.goal}, tie_break={self.tie_break!r})")


def read_config_file(path):
    """Raw key/value pairs from a JSON config file."""
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"config file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file {path} is malformed: {e}") from None
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must hold a JSON object")
    logger.info("Loaded configuration from %s", path)
    return data
