# -*- coding:utf-8 -*-
"""
pose.py
- Headings, grid arithmetic and the robot's believed pose
- Convention: x grows East, y grows North, NORTH -> (x, y + 1)
"""

NORTH, EAST, SOUTH, WEST = 0, 1, 2, 3
HEADINGS = (NORTH, EAST, SOUTH, WEST)
HEADING_NAMES = ("N", "E", "S", "W")

# turn deltas
RIGHT = 1
LEFT = -1
AROUND = 2

_DELTAS = {NORTH: (0, 1), EAST: (1, 0), SOUTH: (0, -1), WEST: (-1, 0)}


def parse_heading(value):
    """Accept 0..3 or one of 'N', 'E', 'S', 'W' (any case)."""
    if isinstance(value, str):
        key = value.strip().upper()[:1]
        if key in HEADING_NAMES:
            return HEADING_NAMES.index(key)
        raise ValueError(f"unknown heading {value!r}")
    if value in HEADINGS and not isinstance(value, bool):
        return int(value)
    raise ValueError(f"unknown heading {value!r}")


def advance(position, heading):
    """Position one cell ahead of `position` when facing `heading`."""
    dx, dy = _DELTAS[heading]
    return position[0] + dx, position[1] + dy


def turn(heading, delta):
    if delta not in (RIGHT, LEFT, AROUND):
        raise ValueError(f"turn delta must be +1, -1 or +2, got {delta!r}")
    return (heading + delta) % 4


def turn_delta(current, target):
    """Shortest turn from `current` to `target`: 0, +1, -1 or +2."""
    diff = (target - current) % 4
    return {0: 0, 1: RIGHT, 2: AROUND, 3: LEFT}[diff]


def relative_headings(heading):
    """Global headings of front/right/left/back, as in the F/R/L scan."""
    return {
        "F": heading,
        "R": (heading + 1) % 4,
        "L": (heading - 1 + 4) % 4,
        "B": (heading + 2) % 4,
    }


def wrap180(angle):
    # [-180, 180)
    return ((angle + 180) % 360) - 180


def heading_from_yaw(yaw_deg, start_heading=NORTH):
    """
    Discretise a gyro yaw into a heading.
    yaw is clockwise-positive and zero at `start_heading`; sectors are +-45 deg.
    """
    yaw = wrap180(yaw_deg)
    if -45 <= yaw < 45:
        offset = 0
    elif 45 <= yaw < 135:
        offset = 1
    elif -135 <= yaw < -45:
        offset = 3
    else:
        offset = 2
    return (start_heading + offset) % 4


class Pose:
    """Believed (position, heading); immutable, drivers swap in new poses."""

    __slots__ = ("position", "heading")

    def __init__(self, position, heading=NORTH):
        self.position = (int(position[0]), int(position[1]))
        self.heading = parse_heading(heading)

    @property
    def x(self):
        return self.position[0]

    @property
    def y(self):
        return self.position[1]

    def ahead(self, heading=None):
        return advance(self.position, self.heading if heading is None else heading)

    def advanced(self):
        return Pose(self.ahead(), self.heading)

    def turned(self, delta):
        return Pose(self.position, turn(self.heading, delta))

    def facing(self, heading):
        return Pose(self.position, heading)

    def moved_to(self, position):
        return Pose(position, self.heading)

    def __eq__(self, other):
        if not isinstance(other, Pose):
            return NotImplemented
        return self.position == other.position and self.heading == other.heading

    def __hash__(self):
        return hash((self.position, self.heading))

    def __repr__(self):
        return f"Pose(x={self.x}, y={self.y}, heading={HEADING_NAMES[self.heading]})"
