# src/bgrotate/util/paths.py: XDG-compliant path resolution.
# This module resolves where bgrotate looks for its configuration file and
# where it keeps the lock record of the running daemon. Locations follow the
# platform conventions through platformdirs, so XDG_CONFIG_HOME and
# XDG_STATE_HOME are honoured on Linux.

import os
from pathlib import Path
import platformdirs

APP_NAME = "bgrotate"
CONFIG_ENV_VAR = "BGROTATE_CONFIG"

def get_xdg_config_home() -> Path:
    """Get the XDG_CONFIG_HOME path for the application."""
    return Path(platformdirs.user_config_dir(APP_NAME))

def get_xdg_state_home() -> Path:
    """Get the XDG_STATE_HOME path for the application."""
    return Path(platformdirs.user_state_dir(APP_NAME))

def get_default_config_path() -> Path:
    """Config file location, unless overridden by $BGROTATE_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return expand_path(override)
    return get_xdg_config_home() / "config.yaml"

def get_lock_path() -> Path:
    """Path of the lock record holding the running daemon's PID."""
    return get_xdg_state_home() / f"{APP_NAME}.pid"

def expand_path(path: str | Path) -> Path:
    """Expand environment variables and user home directory in a path."""
    return Path(os.path.expandvars(os.path.expanduser(str(path)))).resolve()
