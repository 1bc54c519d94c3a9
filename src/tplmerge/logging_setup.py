import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_def_logger = None

def get_logger(name: str = "tplmerge") -> logging.Logger:
    global _def_logger
    if _def_logger:
        return _def_logger

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    ch = logging.StreamHandler()
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(ch)

    _def_logger = logger
    return logger

def attach_log_file(logfile: Path) -> None:
    """Add a file handler to the shared logger, once per path."""
    logger = get_logger()
    target = str(Path(logfile).resolve())
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == target:
            return

    fh = logging.FileHandler(logfile, encoding="utf-8")
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(fh)
