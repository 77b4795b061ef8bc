"""Exceptions raised by the maze drivers and their collaborators."""


class MazeError(Exception):
    """Base class for every error raised by maze_explorer."""


class ConfigError(MazeError):
    """Configuration values that cannot describe a valid run."""


class SensorIndeterminate(MazeError):
    """A cell reading stayed outside both configured colour sets."""

    def __init__(self, code, attempts=1):
        super().__init__(f"indeterminate sensor code {code!r} after {attempts} read(s)")
        self.code = code
        self.attempts = attempts


class MoveExecutionFailure(MazeError):
    """The executor could not complete a move the driver depends on."""

    def __init__(self, kind, result=None):
        detail = f" ({result.status}: {result.detail})" if result is not None else ""
        super().__init__(f"move {kind} failed{detail}")
        self.kind = kind
        self.result = result


class BoundsViolation(MazeError):
    """A position outside the grid reached the map or the pose."""

    def __init__(self, position, rows, cols):
        super().__init__(f"position {position} outside {cols}x{rows} grid")
        self.position = position


class NoReachablePath(MazeError):
    """Every frontier is exhausted and the goal was not reached."""
