#!/usr/bin/env python3
"""
Console logging for the ghostcore engine.

Everything goes through the one "ghostcore" logger. log_event() tags each
record with the subsystem that raised it (State, Config, Tick) and folds
keyword fields onto the end of the message:

    12:04:31 WARNING Config Clamped fade_duration_ms | requested=-1.0 applied=50

Nothing is printed below WARNING until configure_logging() attaches the
console handler; the app shell does that at startup.
"""
import logging
import os

LEVEL_ENV_VAR = "GHOST_SIM_LOG_LEVEL"

logger = logging.getLogger("ghostcore")


def _level_value(name) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level=None) -> int:
    """
    Attach the console handler (once) and set the engine's level.

    level defaults to $GHOST_SIM_LOG_LEVEL, then INFO. Unknown names fall
    back to INFO. Returns the numeric level applied.
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(tag)s %(message)s", "%H:%M:%S"))
        logger.addHandler(handler)
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    applied = _level_value(level)
    logger.setLevel(applied)
    return applied


def log_event(level: str, tag: str, message: str, **fields) -> None:
    if fields:
        message = message + " | " + " ".join(f"{k}={v}" for k, v in fields.items())
    logger.log(_level_value(level), message, extra={"tag": tag})
