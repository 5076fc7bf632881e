from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

from kvlite.config import load_config


def configure_logging(config_path: Union[str, Path, None] = None) -> logging.Logger:
    """Configure root logging from the kvlite config file.

    The level comes from `log_level` in the config (WARNING when the file is
    absent). Existing root handlers are replaced. Returns a module logger for
    the caller.
    """
    level = logging.WARNING
    try:
        level = getattr(logging, load_config(config_path).log_level)
    except Exception:
        # A broken config file should not prevent logging from starting
        logging.getLogger(__name__).exception("Failed to read log level from config")

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)
    logger.debug("Log level set to %s", logging.getLevelName(level))
    return logger
