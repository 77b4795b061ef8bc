"""Grid maze exploration and navigation for a dead-reckoning wheeled robot."""

from .classifier import INDETERMINATE, ObstacleClassifier
from .config import MazeConfig
from .errors import (BoundsViolation, ConfigError, MazeError, MoveExecutionFailure,
                     NoReachablePath, SensorIndeterminate)
from .executor import MoveExecutor, MoveResult
from .grid import OBSTACLE, TRAVERSABLE, UNVISITED, GridMap
from .navigator import MazeNavigator, NavigationReport, navigate
from .planning import ExplorationReport, MazeExplorer, explore
from .pose import EAST, NORTH, SOUTH, WEST, Pose, advance, turn
from .session import MazeSession
from .sim import SimulatedRobot

__version__ = "0.1.0"
