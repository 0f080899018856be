import logging
import json
import datetime
import sys
import os

CONSOLE_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s %(data)s'


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line: timestamp, level, component, event and data.

    Events are logged as `logger.debug("ControllerUpdate", {...})`, so the
    message is the event name and the dict argument is the data. Values that
    JSON cannot encode (quantities, numpy arrays) are written with str().
    """
    def format(self, record):
        entry = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "event": record.msg,
            "data": event_data(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human readable line with the event data appended."""
    def __init__(self):
        super().__init__(CONSOLE_FORMAT)

    def format(self, record):
        record.data = " ".join(f"{k}={v}" for k, v in event_data(record).items())
        return super().format(record).rstrip()


def event_data(record):
    return record.args if isinstance(record.args, dict) else {}


def setup_logging(log_file=None, verbose=False, stream=None):
    """
    Route pid_loop events through the root logger.

    The library never calls this; an application driving a control loop opts in.

    Args:
        log_file (str): JSONL file receiving every event at the active level.
                        If None, events only go to the console.
        verbose (bool): DEBUG level, which includes the per-update
                        ControllerUpdate events. Otherwise INFO for the file
                        and WARNING for the console.
        stream: console stream, sys.stdout by default.

    Returns:
        logging.Handler: the JSONL file handler, or None without a log file.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # clear existing handlers to avoid duplicates if re-initialized
    root_logger.handlers = []

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root_logger.addHandler(console_handler)

    file_handler = None
    if log_file is not None:
        if os.path.dirname(log_file):
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    logging.info("LoggingInitialized", {"log_file": log_file, "verbose": verbose})
    return file_handler


def get_logger(name):
    """
    Returns a logger instance with the given name.
    """
    return logging.getLogger(name)
