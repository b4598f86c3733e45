# src/bgrotate/scheduler.py: The rotation scheduler.
# RotationScheduler alternates between a rotation pass over every active
# workspace and an interruptible sleep. A pass refills exhausted pools, drops
# workspaces that have no images at all, picks one image per workspace and
# hands it to the wallpaper setter. Failures are contained to the workspace
# they happen in; the loop only ends when a shutdown is requested.

import random
from enum import Enum, auto
from typing import Dict, Optional

from .interrupt import Interrupt, InterruptChannel
from .pool import DaemonState
from .setter import WallpaperSetter
from .util.errors import EmptyWorkspaceError, ExternalCallError
from .util.log import get_logger, workspace_context

logger = get_logger(__name__)

class SchedulerState(Enum):
    """Lifecycle phases of the scheduler."""
    IDLE = auto()
    ROTATING_ALL = auto()
    SLEEPING = auto()
    SHUTTING_DOWN = auto()

class RotationScheduler:
    """
    Drives rotation passes until a shutdown request arrives.

    Advance requests that arrive during a pass stay queued in the channel and
    cut the following sleep short. A shutdown request arriving during a pass
    stops it before the next workspace.
    """

    def __init__(
        self,
        state: DaemonState,
        setter: WallpaperSetter,
        channel: InterruptChannel,
        interval_sec: float,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.setter = setter
        self.channel = channel
        self.interval_sec = interval_sec
        self.rng = rng or random.Random()
        self.phase = SchedulerState.IDLE
        self.passes = 0

    def run(self) -> None:
        """Rotate, sleep, repeat. Returns once a shutdown has been requested."""
        while not self.channel.shutdown_requested:
            self.run_pass()
            if self.channel.shutdown_requested:
                break

            self.phase = SchedulerState.SLEEPING
            reason = self.channel.wait(self.interval_sec)
            if reason is Interrupt.TIMEOUT:
                logger.debug(f"Interval of {self.interval_sec} seconds elapsed, rotating.")
            elif reason is Interrupt.ADVANCE:
                logger.info("Advance requested, rotating now.")
            elif reason is Interrupt.SHUTDOWN:
                break

        self.phase = SchedulerState.SHUTTING_DOWN
        logger.info("Shutting down...")

    def run_pass(self) -> Dict[int, str]:
        """
        Rotate every active workspace once, in configuration order.

        Returns the image applied to each workspace that rotated successfully.
        """
        self.phase = SchedulerState.ROTATING_ALL
        self.passes += 1
        applied: Dict[int, str] = {}
        for workspace_id in self.state.active_workspaces():
            if self.channel.shutdown_requested:
                logger.info("Shutdown requested, skipping remaining workspaces.")
                break
            image = self.rotate_workspace(workspace_id)
            if image is not None:
                applied[workspace_id] = image
        return applied

    def rotate_workspace(self, workspace_id: int) -> Optional[str]:
        """Apply the next image to one workspace. Never raises."""
        token = workspace_context.set(workspace_id)
        try:
            pool = self.state.pools[workspace_id]
            needs_refill = pool.is_empty()
            pool.ensure_filled()
            if needs_refill:
                logger.info(f"{len(pool)} backgrounds found for workspace {workspace_id}")

            image = pool.take(self.rng)
            logger.info(f"Workspace {workspace_id} [{len(pool)} left]: {image}")
            self.setter.set(workspace_id, image)
            return image
        except EmptyWorkspaceError:
            logger.info(f"No backgrounds for workspace {workspace_id}. Removing from rotation.")
            self.state.deactivate(workspace_id)
        except ExternalCallError as e:
            logger.error(f"Rotation failed for workspace {workspace_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error rotating workspace {workspace_id}: {e}", exc_info=True)
        finally:
            workspace_context.reset(token)
        return None
