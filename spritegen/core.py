import logging
import logging.handlers
import os
import sys
from typing import Optional

import yaml
from pydantic import ValidationError

from spritegen.config.schemas import Bundle

BASE = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# ---------------- Logging ----------------


def get_logger(name="spritegen", log_file=None):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    fmt = logging.Formatter(
        '{"ts":"%(asctime)s","level":"%(levelname)s","step":"%(name)s","msg":"%(message)s"}'
    )
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)
    logger.propagate = False
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


def set_log_level(level) -> None:
    """Apply a level name (or number) to every spritegen logger created so far."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if not isinstance(level, int):
        return
    for name in list(logging.root.manager.loggerDict):
        if name == "spritegen" or name.startswith("spritegen."):
            logging.getLogger(name).setLevel(level)


log = get_logger("spritegen")

# ---------------- Config ----------------


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must be a mapping/object.")
    return data


def _default_config_path() -> Optional[str]:
    for name in ("monster.yaml", "monster.example.yaml"):
        path = os.path.join(BASE, "conf", name)
        if os.path.exists(path):
            return path
    return None


def load_config(path: Optional[str] = None) -> Bundle:
    """
    Load the generator configuration bundle.

    Reads ``conf/monster.yaml`` (falling back to ``conf/monster.example.yaml``)
    when no path is given. A missing file yields the built-in defaults.

    Raises:
        ValidationError: If the YAML content does not match the schema
    """
    path = path or _default_config_path()
    raw = {}
    if path and os.path.exists(path):
        raw = load_yaml(path)
    else:
        log.info(f"No config file found ({path}), using defaults")

    try:
        cfg = Bundle(**raw)
    except ValidationError as e:
        log.error(f"Config validation failed: {e}")
        raise

    set_log_level(cfg.log_level)
    return cfg
