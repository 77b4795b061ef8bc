# -*- coding:utf-8 -*-
"""
plot.py
- Draw the explored map, the path taken and the robot
- MapPlotter keeps one interactive figure for live updates during a run
"""

import matplotlib.pyplot as plt
import numpy as np

from .grid import OBSTACLE, TRAVERSABLE, UNVISITED

CELL_COLORS = {UNVISITED: "white", TRAVERSABLE: "lightgray", OBSTACLE: "black"}
ARROWS = {0: (0, 0.35), 1: (0.35, 0), 2: (0, -0.35), 3: (-0.35, 0)}


def plot_grid(grid, pose=None, path=None, ax=None, title="Maze Exploration", goal=None):
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))
    ax.clear()

    for y in range(grid.rows):
        for x in range(grid.cols):
            state = int(grid.cells[y, x])
            ax.add_patch(plt.Rectangle((x - 0.5, y - 0.5), 1, 1,
                                       facecolor=CELL_COLORS[state], edgecolor="gray"))

    if goal is not None:
        ax.plot(goal[0], goal[1], "g*", markersize=16, label="Goal")

    # path taken
    if path is not None and len(path) > 1:
        path_x, path_y = zip(*path)
        ax.plot(path_x, path_y, "b-o", markersize=4, label="Path")

    # robot + heading
    if pose is not None:
        cx, cy = pose.position
        ax.plot(cx, cy, "ro", markersize=12, label="Robot")
        dx, dy = ARROWS[pose.heading]
        ax.arrow(cx, cy, dx, dy, head_width=0.15, color="red")

    ax.set_xlim(-0.5, grid.cols - 0.5)
    ax.set_ylim(-0.5, grid.rows - 0.5)
    ax.set_aspect("equal", adjustable="box")
    ax.set_xticks(np.arange(0, grid.cols, 1))
    ax.set_yticks(np.arange(0, grid.rows, 1))
    ax.set_title(title)
    return ax


class MapPlotter:
    """Live view: pass `update` as a driver's on_step callback."""

    def __init__(self, title="Real-time Maze Exploration", pause_s=0.1):
        self.title = title
        self.pause_s = pause_s
        self._fig = None
        self._ax = None

    def _axes(self):
        if self._ax is None:
            plt.ion()
            self._fig, self._ax = plt.subplots(figsize=(8, 8))
        return self._ax

    def update(self, session, stack=None):
        plot_grid(session.grid, session.pose, session.path, ax=self._axes(),
                  title=self.title, goal=session.config.goal)
        plt.pause(self.pause_s)

    def finalize_show(self):
        plt.ioff()
        if self._fig is not None:
            plt.show()

    def save(self, path):
        if self._fig is not None:
            self._fig.savefig(path)
