# -*- coding:utf-8 -*-
"""
navigator.py
- Goal-directed maze run: sense -> classify -> map -> decide -> move
- Decision order: forward, then the sides (tie-break "right" or seeded "random"),
  then back along the breadcrumb trail
- Driving onto an obstacle: mark it, reverse the short return distance,
  turn around; the believed position stays on the previous cell
"""

import logging

from .classifier import INDETERMINATE
from .errors import BoundsViolation, MoveExecutionFailure, NoReachablePath
from .executor import ADVANCE_ONE_CELL
from .grid import OBSTACLE, TRAVERSABLE
from .pose import HEADING_NAMES, relative_headings
from .session import MazeSession

logger = logging.getLogger(__name__)

FORWARD = "FORWARD"
TURN_RIGHT = "TURN_RIGHT"
TURN_LEFT = "TURN_LEFT"
UTURN = "UTURN"
BACKTRACK = "BACKTRACK"


class NavigationReport:
    def __init__(self, status, session, error=None):
        self.status = status
        self.reached_goal = status == "reached_goal"
        self.steps = session.advances
        self.obstacle_events = session.obstacle_events
        self.turns = session.turns
        self.path = list(session.path)
        self.final_pose = session.pose
        self.stats = session.stats()
        self.error = error
        self.map = session.render()

    def as_dict(self):
        data = {
            "reached_goal": self.reached_goal,
            "status": self.status,
            "steps": self.steps,
            "final_position": list(self.final_pose.position),
            "final_heading": HEADING_NAMES[self.final_pose.heading],
            "error": None if self.error is None else str(self.error),
        }
        data.update(self.stats)
        return data

    def summary(self):
        text = f"Navigation {self.status} after {self.steps} step(s), {self.obstacle_events} obstacle event(s)"
        if self.error is not None:
            text += f": {self.error}"
        return text


class MazeNavigator:
    def __init__(self, session, on_step=None):
        self.session = session
        self.on_step = on_step
        # cells entered as new, most recent last; the current cell is on top
        self.breadcrumbs = [session.position]
        self.failures = {}
        self.decisions = 0

    # ---------- Decision ----------
    def decide_action(self):
        """
        Pick (action, heading) from the current cell.
        Only open cells that were never entered count as choices, the one
        behind included; with none left the robot heads back to the previous
        breadcrumb.
        """
        s = self.session
        rel = relative_headings(s.heading)
        pos = s.position

        def open_new(h):
            return s.is_candidate(s.pose.ahead(h))

        if open_new(rel["F"]):
            return FORWARD, rel["F"]

        right, left = open_new(rel["R"]), open_new(rel["L"])
        if right and left:
            if s.config.tie_break == "random" and s.rng.random() < 0.5:
                return TURN_LEFT, rel["L"]
            return TURN_RIGHT, rel["R"]
        if right:
            return TURN_RIGHT, rel["R"]
        if left:
            return TURN_LEFT, rel["L"]
        if open_new(rel["B"]):
            return UTURN, rel["B"]

        if len(self.breadcrumbs) < 2:
            raise NoReachablePath(f"no unexplored cell reachable from {pos}, goal {s.config.goal}")
        previous = self.breadcrumbs[-2]
        for h in (rel["B"], rel["R"], rel["L"], rel["F"]):
            if s.pose.ahead(h) == previous:
                return BACKTRACK, h
        # breadcrumbs are always adjacent
        raise BoundsViolation(previous, s.grid.rows, s.grid.cols)

    # ---------- Main loop ----------
    def run(self):
        s = self.session
        logger.info("Navigating from %s to goal %s", s.pose, s.config.goal)
        self._enter_start()
        status, error = "reached_goal", None

        try:
            while not s.at_goal():
                if s.stopped():
                    logger.info("Stop requested at %s", s.pose)
                    status = "stopped"
                    break
                if self.decisions >= s.config.step_budget:
                    logger.error("Step budget of %d spent at %s", s.config.step_budget, s.pose)
                    status = "step_limit"
                    break
                self.decisions += 1
                self.step()
        except NoReachablePath as e:
            logger.warning("Goal unreachable: %s", e)
            status, error = "unreachable", e
        except (BoundsViolation, MoveExecutionFailure) as e:
            logger.error("Navigation fault at %s: %s", s.pose, e)
            status, error = "fatal", e

        report = NavigationReport(status, s, error)
        logger.info("%s. Map:\n%s", report.summary(), report.map)
        return report

    def _enter_start(self):
        s = self.session
        if s.config.sense_cells:
            verdict = s.read_verdict()
            if verdict == OBSTACLE:
                logger.warning("[SCAN] start cell %s reads as obstacle, keeping it traversable", s.position)
        s.grid.mark(s.position, TRAVERSABLE)

    def step(self):
        s = self.session
        action, heading = self.decide_action()
        target = s.pose.ahead(heading)
        logger.info("[DECIDE] at %s -> %s %s (%s)", s.position, action, HEADING_NAMES[heading], target)

        if not s.turn_to(heading):
            self._count_failure(target, action)
            return
        if action != BACKTRACK and s.probe_ahead() == OBSTACLE:
            logger.info("[SCAN] wall ahead at %s", target)
            s.grid.mark(target, OBSTACLE)
            return
        if not s.drive_forward().ok:
            self._count_failure(target, action)
            return

        if action == BACKTRACK:
            s.commit_advance()
            self.breadcrumbs.pop()
        else:
            self._arrive(target)
        self._check_bounds()
        if self.on_step is not None:
            self.on_step(s, list(self.breadcrumbs))

    def _arrive(self, target):
        s = self.session
        verdict = s.sense() if s.config.sense_cells else TRAVERSABLE
        if verdict == TRAVERSABLE:
            s.commit_advance()
            s.grid.mark(s.position, TRAVERSABLE)
            self.breadcrumbs.append(s.position)
            return

        if verdict == OBSTACLE:
            logger.info("[SCAN] obstacle at %s, reversing", target)
            s.grid.mark(target, OBSTACLE)
            s.obstacle_events += 1
        elif verdict == INDETERMINATE:
            logger.info("[SCAN] %s unresolved, reversing", target)
            s.unresolved.add(target)
        s.back_off()

    def _count_failure(self, target, action):
        s = self.session
        count = self.failures.get(target, 0) + 1
        self.failures[target] = count
        if count < s.config.move_retries:
            return
        if action == BACKTRACK:
            raise MoveExecutionFailure(ADVANCE_ONE_CELL)
        logger.warning("Marking %s as obstacle after %d failed moves", target, count)
        s.grid.mark(target, OBSTACLE)

    def _check_bounds(self):
        s = self.session
        if not s.grid.in_bounds(s.position):
            raise BoundsViolation(s.position, s.grid.rows, s.grid.cols)


def navigate(config, executor, stop_event=None, on_step=None):
    """Run the navigator until the goal, a dead maze or a fault; returns its report."""
    session = MazeSession(config, executor, stop_event=stop_event)
    return MazeNavigator(session, on_step=on_step).run()
