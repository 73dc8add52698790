# config.py
# Settings, per-document editor config, and logging setup

import logging
import os
import sys


DEFAULTS = {
    "indent":         2,
    "root_field":     "__root",
    "invalid_number": "error",
    "log_level":      "WARNING",
}

INVALID_NUMBER_POLICIES = ("error", "null")

ENV_VARS = {
    "indent":         "NODEEDIT_INDENT",
    "invalid_number": "NODEEDIT_INVALID_NUMBER",
    "log_level":      "NODEEDIT_LOG_LEVEL",
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def load_config(overrides=None, environ=None):
    """Defaults, then NODEEDIT_* environment variables, then overrides."""
    if environ is None:
        environ = os.environ
    cfg = dict(DEFAULTS)
    for name, var in ENV_VARS.items():
        raw = environ.get(var)
        if raw is not None and raw.strip():
            cfg[name] = raw.strip()
    if overrides:
        cfg.update(overrides)

    try:
        cfg["indent"] = int(cfg["indent"])
    except (TypeError, ValueError):
        raise ValueError(f"indent must be an integer, got {cfg['indent']!r}")
    if cfg["invalid_number"] not in INVALID_NUMBER_POLICIES:
        raise ValueError(
            f"invalid_number must be one of {INVALID_NUMBER_POLICIES}, "
            f"got {cfg['invalid_number']!r}")
    cfg["log_level"] = str(cfg["log_level"]).upper()
    return cfg


def extract_embedded_editor_config(doc):
    # Returns a dict or None

    # Case 1: root is dict
    if isinstance(doc, dict):
        cfg = doc.get("nodeedit")
        if isinstance(cfg, dict):
            return cfg

    # Case 2: root is list, check element 0
    if isinstance(doc, list) and doc:
        first = doc[0]
        if isinstance(first, dict):
            cfg = first.get("nodeedit")
            if isinstance(cfg, dict):
                return cfg

    return None


def setup_logging(level="WARNING", stream=None):
    root = logging.getLogger("nodeedit")
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    if not any(getattr(h, "_nodeedit", False) for h in root.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
        handler._nodeedit = True
        root.addHandler(handler)
    return root
