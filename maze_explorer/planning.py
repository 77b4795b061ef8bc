# -*- coding:utf-8 -*-
"""
planning.py
- Depth-first coverage of the maze (wall following + backtrack)
- Each stack frame is one cell entered as new; popping a frame drives back
  along the heading that led into it
- Moves go through the session (turn / advance / back off), the map keeps
  visited and obstacle cells
"""

import logging

from .classifier import INDETERMINATE
from .errors import BoundsViolation, MoveExecutionFailure
from .executor import ADVANCE_ONE_CELL
from .grid import OBSTACLE, TRAVERSABLE
from .pose import HEADING_NAMES, advance
from .session import MazeSession

logger = logging.getLogger(__name__)


class Frame:
    """One cell on the depth-first stack."""

    __slots__ = ("position", "scan_start", "scan_index", "entry_heading")

    def __init__(self, position, scan_start, entry_heading=None):
        self.position = position
        self.scan_start = scan_start
        self.scan_index = 0
        # None for the start cell
        self.entry_heading = entry_heading

    def next_heading(self):
        heading = (self.scan_start + self.scan_index) % 4
        self.scan_index += 1
        return heading

    @property
    def exhausted(self):
        return self.scan_index >= 4

    def __repr__(self):
        return f"Frame({self.position}, scan={self.scan_index}/4)"


class ExplorationReport:
    def __init__(self, status, session, max_depth, backtracks, error=None):
        grid = session.grid
        counts = grid.counts()
        self.status = status
        self.visited = counts["traversable"]
        self.obstacles = counts["obstacle"]
        self.unvisited = counts["unvisited"]
        self.max_depth = max_depth
        self.backtracks = backtracks
        self.goal_visited = grid.state(session.config.goal) == TRAVERSABLE
        self.final_pose = session.pose
        self.stats = session.stats()
        self.error = error
        self.map = session.render()

    @property
    def complete(self):
        return self.status == "complete"

    def as_dict(self):
        data = {
            "status": self.status,
            "visited": self.visited,
            "obstacles": self.obstacles,
            "unvisited": self.unvisited,
            "max_depth": self.max_depth,
            "backtracks": self.backtracks,
            "goal_visited": self.goal_visited,
            "final_position": list(self.final_pose.position),
            "final_heading": HEADING_NAMES[self.final_pose.heading],
            "error": None if self.error is None else str(self.error),
        }
        data.update(self.stats)
        return data

    def summary(self):
        text = (f"Exploration {self.status}: {self.visited} visited, {self.obstacles} obstacle(s), "
                f"{self.unvisited} unvisited, {self.stats['advances']} advance(s)")
        if self.error is not None:
            text += f": {self.error}"
        return text


class MazeExplorer:
    """
    Visits every cell reachable from the start exactly once.
    Scan order at each cell: the heading it was entered with, then right turns.
    """

    def __init__(self, session, on_step=None):
        self.session = session
        self.on_step = on_step
        self.backtracks = 0
        self.max_depth = 0

    def run(self):
        s = self.session
        logger.info("Starting DFS exploration from %s", s.pose)
        s.grid.mark(s.position, TRAVERSABLE)
        stack = [Frame(s.position, s.heading)]
        error = None
        try:
            status = self._search(stack)
        except (BoundsViolation, MoveExecutionFailure) as e:
            logger.error("Exploration fault at %s: %s", s.pose, e)
            status, error = "fatal", e

        logger.info("DFS exploration %s. Map:\n%s", status, s.render())
        return ExplorationReport(status, s, self.max_depth, self.backtracks, error)

    def _search(self, stack):
        """Depth-first loop over the frame stack; returns the run status."""
        s = self.session
        while stack:
            if s.stopped():
                logger.info("Stop requested at %s", s.pose)
                return "stopped"
            self.max_depth = max(self.max_depth, len(stack))
            frame = stack[-1]

            if not frame.exhausted:
                heading = frame.next_heading()
                target = advance(frame.position, heading)
                if not s.is_candidate(target):
                    continue
                if self._enter(heading, target):
                    stack.append(Frame(target, heading, entry_heading=heading))
                    self._notify(stack)
                continue

            # ----- Dead end: back to the cell we came from -----
            stack.pop()
            if frame.entry_heading is None:
                break
            if not self._retreat(frame, stack[-1]):
                return "aborted"
            self._notify(stack)
        return "complete"

    def _enter(self, heading, target):
        """Try to move into `target`; True when it was entered and marked traversable."""
        s = self.session
        for _ in range(s.config.move_retries):
            if not s.turn_to(heading):
                continue
            if s.probe_ahead() == OBSTACLE:
                logger.info("[SCAN] wall ahead at %s", target)
                s.grid.mark(target, OBSTACLE)
                return False
            if s.drive_forward().ok:
                break
        else:
            logger.warning("Giving up on %s after %d failed moves", target, s.config.move_retries)
            return False

        verdict = s.sense() if s.config.sense_cells else TRAVERSABLE
        if verdict == TRAVERSABLE:
            s.commit_advance()
            s.grid.mark(s.position, TRAVERSABLE)
            return True

        if verdict == OBSTACLE:
            logger.info("[SCAN] obstacle at %s, backing off", target)
            s.grid.mark(target, OBSTACLE)
            s.obstacle_events += 1
        elif verdict == INDETERMINATE:
            logger.info("[SCAN] %s unresolved, backing off", target)
            s.unresolved.add(target)
        s.back_off()
        return False

    def _retreat(self, frame, parent):
        """Drive back along the entry heading to the parent cell."""
        s = self.session
        back_heading = (frame.entry_heading + 2) % 4
        back = advance(frame.position, back_heading)
        if back != parent.position or not s.grid.is_open(back):
            logger.error("Dead end at %s: cannot step back to %s", frame.position, back)
            return False

        for _ in range(s.config.move_retries):
            if s.turn_to(back_heading) and s.drive_forward().ok:
                s.commit_advance()
                self.backtracks += 1
                return True
        raise MoveExecutionFailure(ADVANCE_ONE_CELL)

    def _notify(self, stack):
        if self.on_step is not None:
            self.on_step(self.session, [f.position for f in stack])


def explore(config, executor, stop_event=None, on_step=None):
    """Run one full exploration and return its report."""
    session = MazeSession(config, executor, stop_event=stop_event)
    return MazeExplorer(session, on_step=on_step).run()
