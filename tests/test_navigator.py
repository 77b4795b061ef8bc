import threading

import pytest

from maze_explorer import executor as ex
from maze_explorer.config import MazeConfig
from maze_explorer.errors import MoveExecutionFailure, NoReachablePath
from maze_explorer.grid import OBSTACLE, TRAVERSABLE
from maze_explorer.navigator import (BACKTRACK, FORWARD, TURN_LEFT, TURN_RIGHT, UTURN,
                                     MazeNavigator, navigate)
from maze_explorer.pose import EAST, NORTH, SOUTH, WEST
from maze_explorer.session import MazeSession
from maze_explorer.sim import SimulatedRobot

SCENARIO_A_PATH = [(0, 0), (0, 1), (0, 2), (0, 3), (1, 3), (2, 3), (3, 3)]


class FixedRng:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_open_field_goes_straight_then_right(config4, open4, consistency_log):
    report = navigate(config4, open4, on_step=consistency_log)
    assert report.status == "reached_goal"
    assert report.reached_goal
    assert report.steps == 6
    assert report.obstacle_events == 0
    assert report.path == SCENARIO_A_PATH
    assert report.final_pose.position == (3, 3)
    assert consistency_log.seen == SCENARIO_A_PATH[1:]


def test_obstacle_off_the_route_is_never_touched(config4):
    sim = SimulatedRobot.open_field(4, 4, obstacles=[(1, 0)])
    report = navigate(config4, sim)
    assert report.path == SCENARIO_A_PATH
    assert report.obstacle_events == 0


def test_obstacle_ahead_is_marked_and_backed_off(config4):
    sim = SimulatedRobot.open_field(4, 4, obstacles=[(0, 1)])
    session = MazeSession(config4, sim)
    report = MazeNavigator(session).run()

    assert report.reached_goal
    assert report.obstacle_events == 1
    assert sim.moves.count(ex.REVERSE_SHORT) == 1
    assert session.grid.state((0, 1)) == OBSTACLE
    assert report.path == [(0, 0), (1, 0), (2, 0), (3, 0), (3, 1), (3, 2), (3, 3)]
    assert report.steps == 6
    # the obstacle tile never became part of the believed path
    assert (0, 1) not in report.path


def test_decide_prefers_forward_then_right(session4):
    nav = MazeNavigator(session4)
    session4.grid.mark((0, 0), TRAVERSABLE)
    assert nav.decide_action() == (FORWARD, NORTH)
    session4.grid.mark((0, 1), OBSTACLE)
    assert nav.decide_action() == (TURN_RIGHT, EAST)


def test_decide_backtracks_to_previous_breadcrumb(session4, open4):
    nav = MazeNavigator(session4)
    session4.grid.mark((0, 0), TRAVERSABLE)
    nav.step()
    assert session4.position == (0, 1)
    for pos in ((0, 2), (1, 1)):
        session4.grid.mark(pos, OBSTACLE)
    assert nav.decide_action() == (BACKTRACK, SOUTH)


def test_no_breadcrumb_left_raises(config4, open4):
    config = config4.replace(known_obstacles=[(0, 1), (1, 0)])
    nav = MazeNavigator(MazeSession(config, open4))
    with pytest.raises(NoReachablePath):
        nav.decide_action()


def test_tie_break_right_and_seeded_left():
    config = MazeConfig(rows=5, cols=5, start=(2, 0), start_heading="S", goal=(4, 4))

    sim = SimulatedRobot.open_field(5, 5, start=(2, 0), heading="S")
    nav = MazeNavigator(MazeSession(config, sim))
    assert nav.decide_action() == (TURN_RIGHT, WEST)

    random_cfg = config.replace(tie_break="random")
    nav = MazeNavigator(MazeSession(random_cfg, sim, rng=FixedRng(0.1)))
    assert nav.decide_action() == (TURN_LEFT, EAST)
    nav = MazeNavigator(MazeSession(random_cfg, sim, rng=FixedRng(0.9)))
    assert nav.decide_action() == (TURN_RIGHT, WEST)


def test_random_tie_break_is_reproducible_with_seed():
    config = MazeConfig(rows=5, cols=5, start=(2, 0), start_heading="S", goal=(4, 4),
                        tie_break="random", seed=42)
    paths = []
    for _ in range(2):
        sim = SimulatedRobot.open_field(5, 5, start=(2, 0), heading="S")
        report = navigate(config, sim)
        assert report.reached_goal
        paths.append(report.path)
    assert paths[0] == paths[1]


def test_unreachable_goal_returns_to_start(config4):
    sim = SimulatedRobot.open_field(4, 4, obstacles=[(2, 3), (3, 2)])
    report = navigate(config4, sim)
    assert report.status == "unreachable"
    assert not report.reached_goal
    assert isinstance(report.error, NoReachablePath)
    assert report.final_pose.position == (0, 0)
    assert report.as_dict()["error"]


def test_failed_moves_are_retried(config4, open4):
    open4.fail_next(ex.ADVANCE_ONE_CELL, count=2)
    report = navigate(config4, open4)
    assert report.reached_goal
    assert report.steps == 6
    assert report.stats["move_failures"] == 2


def test_repeated_failures_mark_target_as_obstacle(config4, open4):
    open4.fail_next(ex.ADVANCE_ONE_CELL, count=3)
    session = MazeSession(config4, open4)
    report = MazeNavigator(session).run()
    assert report.reached_goal
    assert session.grid.state((0, 1)) == OBSTACLE
    assert report.obstacle_events == 0
    assert report.path[1] == (1, 0)


def test_failed_backtrack_is_fatal():
    config = MazeConfig(rows=1, cols=3, start=(1, 0), start_heading="E", goal=(0, 0))
    sim = SimulatedRobot.open_field(1, 3, start=(1, 0), heading="E")

    def on_step(session, breadcrumbs):
        if session.position == (2, 0):
            sim.fail_next(ex.ADVANCE_ONE_CELL, count=3)

    report = navigate(config, sim, on_step=on_step)
    assert report.status == "fatal"
    assert isinstance(report.error, MoveExecutionFailure)
    assert report.final_pose.position == (2, 0)


def test_indeterminate_skip_policy(config4, open4):
    config = config4.replace(indeterminate_policy="skip")
    open4.queue_readings(6, 0, 0, 0)
    session = MazeSession(config, open4)
    report = MazeNavigator(session).run()
    assert report.reached_goal
    assert session.unresolved == {(0, 1)}
    assert session.grid.state((0, 1)) == 0
    assert open4.moves.count(ex.REVERSE_SHORT) == 1


def test_step_budget(config4, open4):
    report = navigate(config4.replace(max_steps=3), open4)
    assert report.status == "step_limit"
    assert report.final_pose.position == (0, 3)


def test_stop_before_first_step(config4, open4):
    stop = threading.Event()
    stop.set()
    report = navigate(config4, open4, stop_event=stop)
    assert report.status == "stopped"
    assert report.steps == 0
    assert open4.moves == []


def test_gyro_drift_is_reported_not_corrected(config4):
    sim = SimulatedRobot.open_field(4, 4, gyro_drift_deg=20.0)
    report = navigate(config4, sim)
    assert report.reached_goal
    assert report.stats["heading_warnings"] == 1
    assert report.path == SCENARIO_A_PATH


def test_ultrasonic_lookahead_avoids_driving_onto_obstacle(config4):
    config = config4.replace(wall_threshold_mm=200)
    sim = SimulatedRobot.open_field(4, 4, obstacles=[(0, 1)])
    session = MazeSession(config, sim)
    report = MazeNavigator(session).run()
    assert report.reached_goal
    assert ex.REVERSE_SHORT not in sim.moves
    assert sim.visits[1, 0] == 0
    assert session.grid.state((0, 1)) == OBSTACLE


def test_report_dict_and_summary(config4, open4):
    report = navigate(config4, open4)
    data = report.as_dict()
    assert data["reached_goal"] is True
    assert data["steps"] == 6
    assert data["final_position"] == [3, 3]
    assert data["final_heading"] == "E"
    assert data["error"] is None
    assert report.summary() == "Navigation reached_goal after 6 step(s), 0 obstacle event(s)"


def test_turns_around_when_only_the_cell_behind_is_open():
    config = MazeConfig(rows=4, cols=1, start=(0, 0), start_heading="S", goal=(0, 3))
    sim = SimulatedRobot.open_field(4, 1, heading="S")
    session = MazeSession(config, sim)
    nav = MazeNavigator(session)
    session.grid.mark((0, 0), TRAVERSABLE)
    assert nav.decide_action() == (UTURN, NORTH)

    report = navigate(config, SimulatedRobot.open_field(4, 1, heading="S"))
    assert report.reached_goal
    assert report.steps == 3
    assert report.path == [(0, 0), (0, 1), (0, 2), (0, 3)]


def test_start_facing_away_from_the_only_exit(config4, open4):
    config = config4.replace(start_heading="W", known_obstacles=[(0, 1)])
    sim = SimulatedRobot.open_field(4, 4, obstacles=[(0, 1)], heading="W")
    report = navigate(config, sim)
    assert report.reached_goal
    assert report.path[1] == (1, 0)
    assert report.final_pose.position == (3, 3)


def test_untried_side_is_kept_after_the_chosen_side_is_walled():
    config = MazeConfig(rows=1, cols=3, start=(1, 0), start_heading="N", goal=(0, 0),
                        wall_threshold_mm=200)
    sim = SimulatedRobot.open_field(1, 3, obstacles=[(2, 0)], start=(1, 0), heading="N")
    session = MazeSession(config, sim)
    report = MazeNavigator(session).run()
    assert report.reached_goal
    assert session.grid.state((2, 0)) == OBSTACLE
    assert ex.REVERSE_SHORT not in sim.moves
    assert report.path == [(1, 0), (0, 0)]
