# -*- coding:utf-8 -*-
"""
session.py
- One run's state: config, map, believed pose, classifier, executor
- Act/sense helpers shared by the Explorer and the Navigator
- The pose changes only after the executor confirms the move
"""

import logging
import random
import threading

from . import executor as ex
from .classifier import INDETERMINATE, VERDICT_NAMES, ObstacleClassifier, color_name
from .errors import BoundsViolation, MoveExecutionFailure, SensorIndeterminate
from .grid import TRAVERSABLE, GridMap
from .pose import AROUND, HEADING_NAMES, Pose, heading_from_yaw, turn_delta, wrap180

logger = logging.getLogger(__name__)


class MazeSession:
    def __init__(self, config, executor, classifier=None, stop_event=None, rng=None):
        self.config = config
        self.executor = executor
        self.classifier = classifier or ObstacleClassifier.from_config(config)
        self.stop_event = stop_event or threading.Event()
        self.rng = rng or random.Random(config.seed)

        self.grid = GridMap(config.rows, config.cols)
        self.grid.seed_obstacles(config.known_obstacles)
        self.pose = Pose(config.start, config.start_heading)
        self.path = [self.pose.position]
        # cells whose reading stayed indeterminate under the "skip" policy
        self.unresolved = set()

        self.advances = 0
        self.turns = 0
        self.reverses = 0
        self.obstacle_events = 0
        self.move_failures = 0
        self.indeterminate_reads = 0
        self.heading_warnings = 0
        self.max_heading_drift = 0.0

    # ----- Queries -----
    @property
    def position(self):
        return self.pose.position

    @property
    def heading(self):
        return self.pose.heading

    def at_goal(self):
        return self.pose.position == self.config.goal

    def stopped(self):
        return self.stop_event.is_set()

    def is_candidate(self, pos):
        """Open, never entered, and not given up on."""
        return self.grid.is_open(pos) and self.grid.is_unvisited(pos) and pos not in self.unresolved

    def render(self):
        return self.grid.render(self.pose)

    # ----- Moves -----
    def magnitude(self, kind):
        cfg = self.config
        return {
            ex.ADVANCE_ONE_CELL: cfg.cell_length_m,
            ex.REVERSE_SHORT: -cfg.return_length_m,
            ex.TURN_RIGHT_90: 90.0,
            ex.TURN_LEFT_90: -90.0,
            ex.TURN_AROUND_180: 180.0,
        }[kind]

    def execute(self, kind):
        result = self.executor.execute_move(kind, self.magnitude(kind))
        if not isinstance(result, ex.MoveResult):
            result = ex.MoveResult(ex.OK if result else ex.FAILED)
        if result.ok:
            logger.debug("[MOVE] %s ok at %s", kind, self.pose)
        else:
            self.move_failures += 1
            logger.warning("[MOVE] %s -> %s %s at %s", kind, result.status, result.detail, self.pose)
        return result

    def turn_to(self, heading):
        """Reorient to `heading`; the believed heading changes only on success."""
        delta = turn_delta(self.pose.heading, heading)
        if delta == 0:
            return True
        result = self.execute(ex.TURN_KINDS[delta])
        if not result.ok:
            return False
        self.pose = self.pose.turned(delta)
        self.turns += 1
        self.check_heading()
        return True

    def drive_forward(self):
        """
        Physically advance one cell without committing the position.
        The target is validated first: leaving the grid is never attempted.
        """
        target = self.pose.ahead()
        if not self.grid.in_bounds(target):
            raise BoundsViolation(target, self.grid.rows, self.grid.cols)
        return self.execute(ex.ADVANCE_ONE_CELL)

    def commit_advance(self):
        target = self.pose.ahead()
        if not self.grid.in_bounds(target):
            raise BoundsViolation(target, self.grid.rows, self.grid.cols)
        self.pose = self.pose.advanced()
        self.advances += 1
        self.path.append(self.pose.position)
        logger.info("[MOVE] -> %s", self.pose)

    def back_off(self):
        """
        Reverse the short return distance and turn around.
        Used after driving onto a cell that turned out to be blocked;
        the believed position never left the previous cell.
        """
        for kind in (ex.REVERSE_SHORT, ex.TURN_AROUND_180):
            for _ in range(self.config.move_retries):
                result = self.execute(kind)
                if result.ok:
                    break
            else:
                raise MoveExecutionFailure(kind, result)
            if kind == ex.REVERSE_SHORT:
                self.reverses += 1
        self.pose = self.pose.turned(AROUND)
        self.turns += 1
        self.check_heading()

    # ----- Sensing -----
    def read_verdict(self, strict=False):
        """
        Read the floor sensor, retrying while the code is indeterminate.
        With strict=True a reading that never resolves raises SensorIndeterminate,
        otherwise INDETERMINATE is returned.
        """
        attempts = 1 + self.config.sensor_retries
        code = None
        for _ in range(attempts):
            code = self.executor.read_cell_sensor()
            verdict = self.classifier.classify(code)
            logger.debug("[SCAN] code=%r (%s) -> %s", code, color_name(code), VERDICT_NAMES[verdict])
            if verdict != INDETERMINATE:
                return verdict
            self.indeterminate_reads += 1
        if strict:
            raise SensorIndeterminate(code, attempts)
        return INDETERMINATE

    def sense(self):
        """Verdict for the cell just driven onto, with the indeterminate policy applied."""
        verdict = self.read_verdict()
        if verdict == INDETERMINATE and self.config.indeterminate_policy == "traversable":
            logger.info("[SCAN] reading stayed indeterminate, treating as traversable")
            return TRAVERSABLE
        return verdict

    def probe_ahead(self):
        """Ultrasonic look-ahead for the next cell; indeterminate when unavailable."""
        if self.classifier.wall_threshold_mm is None:
            return INDETERMINATE
        distance = self.executor.read_front_distance()
        verdict = self.classifier.classify_distance(distance)
        logger.debug("[SCAN] front distance=%r mm -> %s", distance, VERDICT_NAMES[verdict])
        return verdict

    def check_heading(self):
        """Compare the gyro with the believed heading; only reports drift."""
        yaw = self.executor.read_heading_correction()
        if yaw is None:
            return None
        expected = wrap180((self.pose.heading - self.config.start_heading) * 90)
        drift = wrap180(yaw - expected)
        self.max_heading_drift = max(self.max_heading_drift, abs(drift))
        if abs(drift) > self.config.heading_tolerance_deg:
            self.heading_warnings += 1
            logger.warning("[GYRO] yaw %.1f deg (%s) is %.1f deg off heading %s",
                           yaw, HEADING_NAMES[heading_from_yaw(yaw, self.config.start_heading)],
                           drift, self.pose)
        return drift

    # ----- Reporting -----
    def stats(self):
        return {
            "advances": self.advances,
            "turns": self.turns,
            "reverses": self.reverses,
            "obstacle_events": self.obstacle_events,
            "move_failures": self.move_failures,
            "indeterminate_reads": self.indeterminate_reads,
            "heading_warnings": self.heading_warnings,
        }
