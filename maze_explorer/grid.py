# -*- coding:utf-8 -*-
"""
grid.py
- Cell-state map of the maze (numpy array indexed [y, x])
- Bounds/openness queries and the text render used in reports
"""

import logging

import numpy as np

from .errors import BoundsViolation

logger = logging.getLogger(__name__)

UNVISITED = 0
TRAVERSABLE = 1
OBSTACLE = 2
STATE_NAMES = {UNVISITED: "unvisited", TRAVERSABLE: "traversable", OBSTACLE: "obstacle"}

GLYPHS = {UNVISITED: "_", TRAVERSABLE: ".", OBSTACLE: "#"}
ROBOT_GLYPHS = ("^", ">", "v", "<")  # N, E, S, W


class GridMap:
    def __init__(self, rows, cols):
        if rows <= 0 or cols <= 0:
            raise ValueError(f"grid must be at least 1x1, got {cols}x{rows}")
        self.rows, self.cols = int(rows), int(cols)
        self.cells = np.full((self.rows, self.cols), UNVISITED, dtype=np.int8)
        # how many times each cell went to TRAVERSABLE (must stay <= 1)
        self.mark_count = np.zeros((self.rows, self.cols), dtype=np.int32)

    # ----- Queries -----
    def in_bounds(self, pos):
        x, y = pos
        return 0 <= x < self.cols and 0 <= y < self.rows

    def state(self, pos):
        self._require(pos)
        x, y = pos
        return int(self.cells[y, x])

    def is_open(self, pos):
        """In bounds and not an obstacle."""
        if not self.in_bounds(pos):
            return False
        x, y = pos
        return int(self.cells[y, x]) != OBSTACLE

    def is_unvisited(self, pos):
        return self.in_bounds(pos) and self.state(pos) == UNVISITED

    def cells_in(self, state):
        ys, xs = np.nonzero(self.cells == state)
        return sorted(zip(xs.tolist(), ys.tolist()))

    def counts(self):
        return {
            "unvisited": int(np.sum(self.cells == UNVISITED)),
            "traversable": int(np.sum(self.cells == TRAVERSABLE)),
            "obstacle": int(np.sum(self.cells == OBSTACLE)),
        }

    # ----- Updates -----
    def mark(self, pos, state):
        """
        Set a cell's state. Returns True when the cell changed.
        Obstacle and Traversable cells are final: re-marking is a no-op.
        """
        if state not in STATE_NAMES:
            raise ValueError(f"unknown cell state {state!r}")
        self._require(pos)
        x, y = pos
        current = int(self.cells[y, x])
        if current == state:
            return False
        if current != UNVISITED:
            logger.warning("[MAP] refusing %s -> %s at %s",
                           STATE_NAMES[current], STATE_NAMES[state], pos)
            return False
        self.cells[y, x] = state
        if state == TRAVERSABLE:
            self.mark_count[y, x] += 1
        logger.debug("[MAP] %s marked %s", pos, STATE_NAMES[state])
        return True

    def seed_obstacles(self, positions):
        for pos in positions:
            self.mark(tuple(pos), OBSTACLE)

    # ----- Display -----
    def render(self, pose=None):
        """North-up text snapshot; the robot is drawn as its heading arrow."""
        lines = []
        for y in range(self.rows - 1, -1, -1):
            row = []
            for x in range(self.cols):
                if pose is not None and pose.position == (x, y):
                    row.append(ROBOT_GLYPHS[pose.heading])
                else:
                    row.append(GLYPHS[int(self.cells[y, x])])
            lines.append(" ".join(row))
        return "\n".join(lines)

    def __str__(self):
        return self.render()

    def _require(self, pos):
        if not self.in_bounds(pos):
            raise BoundsViolation(tuple(pos), self.rows, self.cols)
