# -*- coding:utf-8 -*-
"""
executor.py
- Contract between the drivers and whatever moves the robot
- Every call blocks until the physical action is over and reports how it ended
"""

from collections import namedtuple

ADVANCE_ONE_CELL = "ADVANCE_ONE_CELL"
REVERSE_SHORT = "REVERSE_SHORT"
TURN_LEFT_90 = "TURN_LEFT_90"
TURN_RIGHT_90 = "TURN_RIGHT_90"
TURN_AROUND_180 = "TURN_AROUND_180"
MOVE_KINDS = (ADVANCE_ONE_CELL, REVERSE_SHORT, TURN_LEFT_90, TURN_RIGHT_90, TURN_AROUND_180)

# turn delta -> move kind (see pose.turn_delta)
TURN_KINDS = {1: TURN_RIGHT_90, -1: TURN_LEFT_90, 2: TURN_AROUND_180}

OK = "ok"
BLOCKED = "blocked"
TIMEOUT = "timeout"
FAILED = "failed"


class MoveResult(namedtuple("MoveResult", ["status", "detail"])):
    __slots__ = ()

    def __new__(cls, status, detail=""):
        return super().__new__(cls, status, detail)

    @property
    def ok(self):
        return self.status == OK

    def __bool__(self):
        return self.ok


class MoveExecutor:
    """
    Base class for move executors.
    Subclasses implement execute_move and read_cell_sensor; the other
    readings are optional accuracy aids and default to "not available".
    """

    def execute_move(self, kind, magnitude):
        """Run one move. `magnitude` is metres for drives, degrees (clockwise +) for turns."""
        raise NotImplementedError

    def read_cell_sensor(self):
        """Colour code under the robot, or None when the read failed."""
        raise NotImplementedError

    def read_heading_correction(self):
        """Gyro yaw in degrees (clockwise +, zero at start), or None."""
        return None

    def read_front_distance(self):
        """Distance to whatever is ahead in millimetres, or None."""
        return None

    def stop(self):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.stop()
        self.close()
        return False
