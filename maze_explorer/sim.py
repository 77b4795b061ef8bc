# -*- coding:utf-8 -*-
"""
sim.py
- Simulated robot on a ground-truth colour map (numpy array indexed [y, x])
- Implements the MoveExecutor contract so both drivers run without hardware
- Fault injection: failed moves, indeterminate reads, gyro drift
"""

import csv
import logging
import random
from collections import deque

import numpy as np

from . import executor as ex
from .errors import ConfigError
from .pose import AROUND, LEFT, NORTH, RIGHT, advance, parse_heading, turn, wrap180

logger = logging.getLogger(__name__)

BLACK, RED, WHITE, BROWN = 1, 5, 6, 7
FLOOR = WHITE

# text maze glyphs, north-up
TILE_CODES = {"#": BLACK, "R": RED, ".": WHITE, "b": BROWN, "?": 0}

_TURNS = {ex.TURN_RIGHT_90: RIGHT, ex.TURN_LEFT_90: LEFT, ex.TURN_AROUND_180: AROUND}


class SimulatedRobot(ex.MoveExecutor):
    def __init__(self, truth, start=(0, 0), heading=NORTH, cell_length_m=0.253,
                 gyro=True, gyro_drift_deg=0.0, ultrasonic=True):
        self.truth = np.array(truth, dtype=int)
        if self.truth.ndim != 2 or self.truth.size == 0:
            raise ConfigError("simulated maze must be a non-empty 2-D grid")
        self.rows, self.cols = self.truth.shape
        self.position = (int(start[0]), int(start[1]))
        self.heading = parse_heading(heading)
        self.cell_length_m = cell_length_m
        self.gyro = gyro
        self.gyro_drift_deg = gyro_drift_deg
        self.ultrasonic = ultrasonic

        self.yaw = 0.0
        self._previous = None           # cell left by the last advance
        self._failures = deque()         # (kind or None, status) queued failures
        self._readings = deque()         # queued sensor codes, served before the truth
        self.moves = []
        self.visits = np.zeros_like(self.truth)
        self.visits[self.position[1], self.position[0]] += 1

    # ----- Construction -----
    @classmethod
    def open_field(cls, rows, cols, obstacles=(), obstacle_code=BLACK, floor_code=FLOOR, **kwargs):
        truth = np.full((rows, cols), floor_code, dtype=int)
        for x, y in obstacles:
            truth[y, x] = obstacle_code
        return cls(truth, **kwargs)

    @classmethod
    def from_rows(cls, rows, **kwargs):
        """Text maze, first line is the northmost row: '#' black, 'R' red, '.' white, 'b' brown, '?' unknown."""
        lines = [line.split() if " " in line.strip() else list(line.strip()) for line in rows]
        lines = [line for line in lines if line]
        try:
            truth = [[TILE_CODES[ch] for ch in line] for line in reversed(lines)]
        except KeyError as e:
            raise ConfigError(f"unknown maze tile {e.args[0]!r}") from None
        if len({len(line) for line in truth}) != 1:
            raise ConfigError("maze rows have different lengths")
        return cls(truth, **kwargs)

    @classmethod
    def from_csv(cls, path, **kwargs):
        """CSV of colour codes, first row is the northmost row."""
        try:
            with open(path, "r", newline="") as f:
                data = [[int(cell) for cell in row] for row in csv.reader(f) if row]
        except FileNotFoundError:
            raise ConfigError(f"maze file not found: {path}") from None
        except ValueError as e:
            raise ConfigError(f"maze file {path} is malformed: {e}") from None
        if not data or len({len(row) for row in data}) != 1:
            raise ConfigError(f"maze file {path} is not rectangular")
        logger.info("Loaded %dx%d maze from %s", len(data[0]), len(data), path)
        return cls(list(reversed(data)), **kwargs)

    @classmethod
    def random_maze(cls, rows, cols, density=0.3, seed=None, start=(0, 0), **kwargs):
        rng = random.Random(seed)
        truth = np.full((rows, cols), FLOOR, dtype=int)
        for y in range(rows):
            for x in range(cols):
                if (x, y) != tuple(start) and rng.random() < density:
                    truth[y, x] = rng.choice((BLACK, RED))
        return cls(truth, start=start, **kwargs)

    # ----- Fault injection -----
    def fail_next(self, kind=None, count=1, status=ex.FAILED):
        """Make the next `count` moves of `kind` (any kind when None) fail."""
        for _ in range(count):
            self._failures.append((kind, status))

    def queue_readings(self, *codes):
        self._readings.extend(codes)

    # ----- MoveExecutor -----
    def execute_move(self, kind, magnitude):
        if kind not in ex.MOVE_KINDS:
            raise ValueError(f"unknown move kind {kind!r}")
        self.moves.append(kind)
        if self._failures and self._failures[0][0] in (None, kind):
            _, status = self._failures.popleft()
            return ex.MoveResult(status, "injected")

        if kind == ex.ADVANCE_ONE_CELL:
            target = advance(self.position, self.heading)
            if not self._inside(target):
                return ex.MoveResult(ex.BLOCKED, "field edge")
            self._previous, self.position = self.position, target
            self.visits[target[1], target[0]] += 1
        elif kind == ex.REVERSE_SHORT:
            # backing off a tile the robot only just drove onto
            if self._previous is not None:
                self.position = self._previous
        else:
            self.heading = turn(self.heading, _TURNS[kind])
            self.yaw = wrap180(self.yaw + magnitude + self.gyro_drift_deg)
        if kind != ex.ADVANCE_ONE_CELL:
            self._previous = None
        return ex.MoveResult(ex.OK)

    def read_cell_sensor(self):
        if self._readings:
            return self._readings.popleft()
        x, y = self.position
        return int(self.truth[y, x])

    def read_heading_correction(self):
        return self.yaw if self.gyro else None

    def read_front_distance(self):
        if not self.ultrasonic:
            return None
        free = 0
        pos = advance(self.position, self.heading)
        while self._inside(pos) and self.truth[pos[1], pos[0]] not in (BLACK, RED):
            free += 1
            pos = advance(pos, self.heading)
        return (free + 0.5) * self.cell_length_m * 1000.0

    def _inside(self, pos):
        return 0 <= pos[0] < self.cols and 0 <= pos[1] < self.rows
