# src/bgrotate/daemon.py: The daemon process.
# start_daemon wires the configured lister and setter into a scheduler,
# takes the single-instance lock and runs the rotation loop until SIGINT or
# SIGTERM. request_advance is the other side: it signals an already running
# daemon through its lock record.

from pathlib import Path
from typing import Optional

from . import __version__
from .config import Config
from .guard import InstanceGuard
from .interrupt import InterruptChannel
from .lister import Lister, build_lister
from .pool import DaemonState
from .scheduler import RotationScheduler
from .setter import CommandSetter, WallpaperSetter
from .util.log import get_logger
from .util.paths import get_lock_path

logger = get_logger(__name__)

def build_scheduler(
    config: Config,
    channel: InterruptChannel,
    lister: Optional[Lister] = None,
    setter: Optional[WallpaperSetter] = None,
) -> RotationScheduler:
    """Assemble a scheduler from the configuration."""
    lister = lister or build_lister(config.lister)
    setter = setter or CommandSetter(config.setter)
    state = DaemonState.from_config(config.workspaces, lister)
    return RotationScheduler(state, setter, channel, config.interval_sec)

def start_daemon(
    config: Config,
    lock_path: Optional[Path] = None,
    channel: Optional[InterruptChannel] = None,
    lister: Optional[Lister] = None,
    setter: Optional[WallpaperSetter] = None,
) -> None:
    """
    Run the rotation loop in this process until a shutdown is requested.

    Raises:
        AlreadyRunningError: If another daemon holds the lock record.
    """
    guard = InstanceGuard(lock_path or get_lock_path())
    channel = channel or InterruptChannel()
    scheduler = build_scheduler(config, channel, lister, setter)

    # Handlers go in first so a SIGTERM right after the lock is taken still
    # unwinds through the guard and removes the record.
    channel.install_signal_handlers()
    try:
        with guard:
            logger.info(
                f"bgrotate {__version__} started, rotating {len(config.workspaces)} workspaces "
                f"every {config.interval_sec} seconds."
            )
            scheduler.run()
    finally:
        channel.restore_signal_handlers()

def ensure_not_running(lock_path: Optional[Path] = None) -> None:
    """
    Refuse to start when a lock record already exists.

    Raises:
        AlreadyRunningError: If the lock record exists.
    """
    InstanceGuard(lock_path or get_lock_path()).ensure_not_running()

def request_advance(lock_path: Optional[Path] = None) -> int:
    """
    Signal the running daemon to rotate now. Returns its PID.

    Raises:
        NotRunningError: If no daemon appears to be running.
    """
    return InstanceGuard(lock_path or get_lock_path()).request_advance()
