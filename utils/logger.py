# logger.py
import os, glob, logging
from contextvars import ContextVar
from typing import Dict, Iterable, Optional

_CYCLE_I = ContextVar("cycle_i", default=-1)

LOG_FORMAT = "%(i)06d | %(levelname)s | %(name)s | %(message)s"

# Loggers the fuzzyrules package writes to, one log file each.
LOGGER_NAMES = (
    "main",
    "engine",
    "config",
    "factory",
    "rule",
    "antecedent",
    "consequent",
    "activation",
    "WZ_engine",
    "fuzzifier",
    "defuzzifier",
)


def set_cycle_index(i: int) -> None:
    _CYCLE_I.set(int(i))


def get_cycle_index() -> int:
    return _CYCLE_I.get()


class CycleIndexFilter(logging.Filter):
    """Stamps every record with the engine cycle it was logged in (-1 before the first)."""

    def filter(self, record):
        record.i = _CYCLE_I.get()
        return True


def _reset_handlers(log: logging.Logger) -> None:
    for h in list(log.handlers):
        log.removeHandler(h)
        h.close()


def setup_logging(
    log_dir: str = "logs",
    logger_names: Optional[Iterable[str]] = None,
    console_logger: Optional[str] = "main",
    overwrite: bool = True,
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    cleanup_rotated: bool = True,
) -> Dict[str, logging.Logger]:
    """
    Gives each named logger its own file, <log_dir>/<name>.log.

    Args:
        log_dir (str): Directory of the log files; created if missing.
        logger_names (Optional[Iterable[str]]): Loggers to configure, defaults
            to LOGGER_NAMES.
        console_logger (Optional[str]): Logger that also echoes to the console
            at console_level, or None for file output only. It is configured
            even when it is not in logger_names.
        overwrite (bool): Truncate existing log files instead of appending.
        log_level (int): Level of the loggers and their files.
        console_level (int): Level of the console handler.
        cleanup_rotated (bool): Remove rotated files (*.log.*) left in log_dir.

    Returns:
        Dict[str, logging.Logger]: The configured loggers by name.
    """
    os.makedirs(log_dir, exist_ok=True)
    if cleanup_rotated:
        for path in glob.glob(os.path.join(log_dir, "*.log.*")):
            try:
                os.remove(path)
            except OSError:
                logging.getLogger("main").debug("Could not remove %s", path)

    names = list(LOGGER_NAMES if logger_names is None else logger_names)
    if console_logger is not None and console_logger not in names:
        names.append(console_logger)

    fmt = logging.Formatter(LOG_FORMAT)
    mode = "w" if overwrite else "a"
    loggers = {}
    for name in names:
        log = logging.getLogger(name)
        log.setLevel(log_level)
        log.propagate = False
        _reset_handlers(log)

        fh = logging.FileHandler(os.path.join(log_dir, f"{name}.log"), mode=mode, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(log_level)
        fh.addFilter(CycleIndexFilter())
        log.addHandler(fh)
        loggers[name] = log

    if console_logger is not None:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console.setLevel(console_level)
        console.addFilter(CycleIndexFilter())
        loggers[console_logger].addHandler(console)
        loggers[console_logger].info("Logging system initialized (%d loggers).", len(loggers))
    return loggers


def shutdown_logging(loggers: Iterable[logging.Logger]) -> None:
    """Closes the handlers installed by setup_logging() and restores propagation."""
    for log in loggers:
        _reset_handlers(log)
        log.propagate = True
