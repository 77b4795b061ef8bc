"""Command line entry point: run the Explorer or the Navigator on the simulator or a RoboMaster."""

import argparse
import json
import logging
import signal
import threading

from .config import MazeConfig, read_config_file
from .errors import ConfigError, MazeError
from .navigator import navigate
from .planning import explore
from .sim import SimulatedRobot
from .utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK, EXIT_INCOMPLETE, EXIT_FATAL = 0, 1, 2


def build_parser():
    parser = argparse.ArgumentParser(
        prog="maze-explorer",
        description="Explore a grid maze or navigate it to a goal cell.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  maze-explorer navigate                         # 4x4 open simulated field, goal (3,3)
  maze-explorer explore --maze maze.csv --plot   # full coverage of a CSV maze
  maze-explorer navigate --random 0.25 --seed 7 --tie-break random
  maze-explorer navigate --backend robomaster --config field.json
        """,
    )
    parser.add_argument("mode", choices=("explore", "navigate"))
    parser.add_argument("--config", "-c", help="JSON configuration file")
    parser.add_argument("--backend", choices=("sim", "robomaster"), default="sim")
    parser.add_argument("--conn-type", default="ap", help="RoboMaster connection type (ap, sta, rndis)")
    parser.add_argument("--maze", help="CSV of colour codes for the simulator, north row first")
    parser.add_argument("--random", type=float, metavar="DENSITY",
                        help="simulate a random maze with this obstacle density")
    parser.add_argument("--rows", type=int)
    parser.add_argument("--cols", type=int)
    parser.add_argument("--goal", type=int, nargs=2, metavar=("X", "Y"))
    parser.add_argument("--seed", type=int)
    parser.add_argument("--tie-break", choices=("right", "random"))
    parser.add_argument("--plot", action="store_true", help="live matplotlib view")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--log-file")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def load_config(args):
    data = read_config_file(args.config) if args.config else {}
    for key in ("rows", "cols", "seed", "tie_break"):
        value = getattr(args, key)
        if value is not None:
            data[key] = value
    if args.goal is not None:
        data["goal"] = args.goal
    return MazeConfig.from_dict(data)


def make_executor(args, config):
    if args.backend == "robomaster":
        from .control import RoboMasterExecutor

        return RoboMasterExecutor.connect(conn_type=args.conn_type,
                                          adc_bands=config.adc_color_bands,
                                          use_distance=config.wall_threshold_mm is not None)

    kwargs = {"start": config.start, "heading": config.start_heading,
              "cell_length_m": config.cell_length_m}
    if args.maze:
        sim = SimulatedRobot.from_csv(args.maze, **kwargs)
    elif args.random is not None:
        sim = SimulatedRobot.random_maze(config.rows, config.cols, density=args.random,
                                         seed=config.seed, **kwargs)
    else:
        sim = SimulatedRobot.open_field(config.rows, config.cols,
                                        obstacles=config.known_obstacles, **kwargs)
    if (sim.rows, sim.cols) != (config.rows, config.cols):
        raise ConfigError(f"maze is {sim.cols}x{sim.rows} but the configuration says "
                          f"{config.cols}x{config.rows}")
    return sim


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        config = load_config(args)
        executor = make_executor(args, config)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_FATAL

    on_step = None
    plotter = None
    if args.plot:
        from .plot import MapPlotter

        plotter = MapPlotter(title=f"Maze {args.mode}")
        on_step = plotter.update

    # Ctrl+C stops between steps, never inside a pose update
    stop_event = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: stop_event.set())
    try:
        with executor:
            run = explore if args.mode == "explore" else navigate
            report = run(config, executor, stop_event=stop_event, on_step=on_step)
    except MazeError as e:
        logger.error("Run aborted: %s", e)
        return EXIT_FATAL
    finally:
        signal.signal(signal.SIGINT, previous)

    print(report.map)
    print(report.summary())
    if args.json:
        print(json.dumps(report.as_dict(), indent=2))
    if plotter is not None:
        plotter.finalize_show()

    if report.status in ("complete", "reached_goal"):
        return EXIT_OK
    if report.status == "fatal":
        return EXIT_FATAL
    return EXIT_INCOMPLETE
