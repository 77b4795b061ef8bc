import json
import os

from maze_explorer.cli import build_parser, load_config, main

MAZE = os.path.join(os.path.dirname(__file__), os.pardir, "examples", "maze_10x10.csv")
FIELD = os.path.join(os.path.dirname(__file__), os.pardir, "examples", "field_4x4.json")


def test_navigate_open_field(capsys):
    assert main(["navigate"]) == 0
    out = capsys.readouterr().out
    assert "Navigation reached_goal after 6 step(s)" in out


def test_explore_csv_maze(capsys):
    assert main(["explore", "--maze", MAZE, "--rows", "10", "--cols", "10"]) == 0
    assert "Exploration complete" in capsys.readouterr().out


def test_maze_size_mismatch_is_config_error():
    assert main(["explore", "--maze", MAZE]) == 2


def test_missing_config_file(tmp_path):
    assert main(["navigate", "--config", str(tmp_path / "nope.json")]) == 2


def test_bad_config_value(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tie_break": "left"}))
    assert main(["navigate", "--config", str(path)]) == 2


def test_unreachable_goal_exit_code(tmp_path):
    path = tmp_path / "walled.json"
    path.write_text(json.dumps({"grid": [4, 4], "known_obstacles": [[2, 3], [3, 2]]}))
    assert main(["navigate", "--config", str(path)]) == 1


def test_json_report(capsys):
    assert main(["navigate", "--config", FIELD, "--json"]) == 0
    out = capsys.readouterr().out
    data = json.loads(out[out.index("{"):])
    assert data["reached_goal"] is True
    assert data["steps"] == 6


def test_cli_overrides_file_values():
    args = build_parser().parse_args(["navigate", "--config", FIELD, "--goal", "2", "1",
                                      "--tie-break", "random", "--seed", "3"])
    config = load_config(args)
    assert config.goal == (2, 1)
    assert config.tie_break == "random"
    assert config.seed == 3
    assert (config.rows, config.cols) == (4, 4)
