# src/bgrotate/setter.py: Wallpaper setter adapters.
# The scheduler never touches the desktop itself. It hands a workspace id and
# an image path to a WallpaperSetter, whose only production implementation
# runs an external command such as 'bgswitch -w 2 set -f /path/image.jpg'.

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

from .config import SetterConfig
from .util.shell import run_command

class WallpaperSetter(ABC):
    """Abstract base class for applying a background to a workspace."""

    @abstractmethod
    def set(self, workspace_id: int, image: str) -> None:
        """Apply image to the workspace. Raises ExternalCallError on failure."""
        pass

class CommandSetter(WallpaperSetter):
    """
    Runs the configured command once per rotation.

    Every argument may contain the '{workspace}' and '{image}' placeholders.
    The image path is passed as its own argv element, so no shell quoting is
    involved.
    """

    def __init__(self, config: SetterConfig):
        self.config = config

    def build_command(self, workspace_id: int, image: str) -> List[str]:
        return [self.config.command] + [
            arg.replace("{workspace}", str(workspace_id)).replace("{image}", image)
            for arg in self.config.args
        ]

    def set(self, workspace_id: int, image: str) -> None:
        run_command(self.build_command(workspace_id, image), timeout=self.config.timeout_sec)
