"""Configuration: defaults <- ~/.pfs.env <- process environment.

The env file is parsed with python-dotenv but never loaded into os.environ,
so callers (and tests) can pass explicit sources.
"""

import math
import os

from dotenv import dotenv_values

from protocol import DEFAULT_TIMEOUT, ConfigurationError

ENV_FILE = os.path.expanduser("~/.pfs.env")

DEFAULTS = {
    "ollama_url": None,
    "ollama_model": None,
    "timeout": DEFAULT_TIMEOUT,
}

# env var -> config key
ENV_KEYS = {
    "OLLAMA_BASE_URL": "ollama_url",
    "OLLAMA_MODEL": "ollama_model",
    "PFS_TIMEOUT": "timeout",
}


def _from_env(values):
    """Pick the known keys out of an env mapping, skipping blanks."""
    cfg = {}
    for var, key in ENV_KEYS.items():
        value = values.get(var)
        if value is None:
            continue
        value = value.strip()
        if value:
            cfg[key] = value
    return cfg


def _coerce_timeout(value):
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"PFS_TIMEOUT must be a number of seconds, got {value!r}")
    if not math.isfinite(timeout):
        raise ConfigurationError(f"PFS_TIMEOUT must be a finite number of seconds, got {value!r}")
    if timeout <= 0:
        raise ConfigurationError(f"PFS_TIMEOUT must be positive, got {value!r}")
    return timeout


def load_config(env_file=None, environ=None):
    """Load config. Later sources override earlier ones.

    env_file defaults to ~/.pfs.env (a missing file is fine); environ defaults
    to os.environ. Required keys are enforced by the provider, not here.
    """
    cfg = dict(DEFAULTS)

    path = env_file or ENV_FILE
    if os.path.isfile(path):
        try:
            values = dotenv_values(path)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"failed to read {path}: {e}") from e
        cfg.update(_from_env(values))
        cfg["_env_file"] = path

    cfg.update(_from_env(os.environ if environ is None else environ))

    cfg["timeout"] = _coerce_timeout(cfg["timeout"])
    return cfg
