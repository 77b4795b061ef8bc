import matplotlib

matplotlib.use("Agg")

import pytest

from maze_explorer.config import MazeConfig
from maze_explorer.grid import TRAVERSABLE
from maze_explorer.session import MazeSession
from maze_explorer.sim import SimulatedRobot


@pytest.fixture
def config4():
    return MazeConfig(rows=4, cols=4, start=(0, 0), start_heading="N", goal=(3, 3))


@pytest.fixture
def open4(config4):
    return SimulatedRobot.open_field(4, 4, start=config4.start, heading=config4.start_heading)


@pytest.fixture
def session4(config4, open4):
    return MazeSession(config4, open4)


@pytest.fixture
def consistency_log():
    """on_step callback asserting the believed cell is mapped traversable."""
    seen = []

    def on_step(session, stack):
        assert session.grid.in_bounds(session.position)
        assert session.grid.state(session.position) == TRAVERSABLE
        seen.append(session.position)

    on_step.seen = seen
    return on_step
