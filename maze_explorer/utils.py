import logging
import os


def setup_logging(level=logging.INFO, log_file=None):
    """
    Log to the console and, when `log_file` is given, to that file as well.
    Earlier root handlers are removed so repeated calls don't duplicate lines.
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    if log_file:
        logging.info("Logging initialized to %s", log_file)
    return log_file
