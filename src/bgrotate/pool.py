# src/bgrotate/pool.py: Per-workspace image pools and the daemon state.
# A WorkspacePool holds the images of one workspace that have not been shown in
# the current cycle. It is refilled from the lister only once it is empty, so
# no image repeats before every other image of the workspace has been shown.
# DaemonState owns all pools and the set of workspaces still in rotation.

from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import Workspace
from .lister import Lister
from .picker import pick
from .util.errors import EmptyWorkspaceError

class WorkspacePool:
    """The not-yet-shown images of a single workspace."""

    def __init__(self, workspace_id: int, dirs: Sequence[Path], lister: Lister):
        self.workspace_id = workspace_id
        self.dirs = list(dirs)
        self.lister = lister
        self.candidates: List[str] = []

    def __len__(self) -> int:
        return len(self.candidates)

    def is_empty(self) -> bool:
        return not self.candidates

    def refill(self) -> List[str]:
        """
        Reload the pool from the lister and return its new contents.

        Duplicate paths are collapsed, keeping the first occurrence.
        ExternalCallError from the lister propagates and leaves the pool as it was.
        """
        images = self.lister.list_images(self.dirs)
        self.candidates = list(dict.fromkeys(images))
        return list(self.candidates)

    def ensure_filled(self) -> None:
        """Refill an empty pool; raise EmptyWorkspaceError if it stays empty."""
        if self.is_empty():
            self.refill()
        if self.is_empty():
            raise EmptyWorkspaceError(
                f"No backgrounds found for workspace {self.workspace_id}."
            )

    def take(self, rng: Optional[random.Random] = None) -> str:
        """Remove and return a random image. The pool must not be empty."""
        return pick(self.candidates, rng)

class DaemonState:
    """Pools of the active workspaces, in configuration order."""

    def __init__(self, pools: Sequence[WorkspacePool]):
        self.pools: Dict[int, WorkspacePool] = {pool.workspace_id: pool for pool in pools}

    @classmethod
    def from_config(cls, workspaces: Sequence[Workspace], lister: Lister) -> "DaemonState":
        return cls([WorkspacePool(ws.id, ws.dirs, lister) for ws in workspaces])

    def active_workspaces(self) -> List[int]:
        return list(self.pools)

    def deactivate(self, workspace_id: int) -> None:
        """Drop a workspace from rotation for the rest of the process lifetime."""
        self.pools.pop(workspace_id, None)
