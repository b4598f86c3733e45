# src/bgrotate/lister.py: Image listing strategies.
# A Lister turns the directories configured for a workspace into the ordered
# list of image paths that refills the workspace's pool. Two strategies exist:
# a plain directory scan and a scan driven by an external filesystem query
# command. build_lister picks one from the configuration.

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Sequence

import pathspec

from .config import ListerConfig
from .util.errors import ExternalCallError
from .util.log import get_logger
from .util.shell import run_command

logger = get_logger(__name__)

IMAGE_QUERY = "((name=*)&&(BEOS:TYPE=image/*))"

class Lister(ABC):
    """Abstract base class for an image lister."""

    @abstractmethod
    def list_images(self, dirs: Sequence[Path]) -> List[str]:
        """
        Return the image paths found in dirs, in a stable order.

        Raises ExternalCallError when the listing itself fails. A directory
        that does not exist is not a failure; it simply yields nothing.
        """
        pass

class DirectoryLister(Lister):
    """
    Lists the regular files directly inside each directory.

    When include patterns are configured, only file names matching one of
    them (gitwildmatch syntax) are kept.
    """

    def __init__(self, include: Sequence[str] = ()):
        self.include_spec = pathspec.PathSpec.from_lines('gitwildmatch', include) if include else None

    def list_images(self, dirs: Sequence[Path]) -> List[str]:
        images: List[str] = []
        for directory in dirs:
            if not directory.is_dir():
                logger.warning(f"Image directory not found: {directory}")
                continue
            try:
                files = sorted(p for p in directory.iterdir() if p.is_file())
            except OSError as e:
                raise ExternalCallError(f"Failed to list '{directory}': {e}") from e
            if self.include_spec is not None:
                files = [p for p in files if self.include_spec.match_file(p.name)]
            images.extend(str(p) for p in files)
        return images

class QueryLister(Lister):
    """
    Lists images by running a filesystem query command for each directory.

    The query is volume-wide, so results outside the requested directory are
    dropped.
    """

    def __init__(self, command: str = "query"):
        self.command = command

    def list_images(self, dirs: Sequence[Path]) -> List[str]:
        images: List[str] = []
        for directory in dirs:
            output = run_command([self.command, "-f", "-v", str(directory), IMAGE_QUERY])
            prefix = str(directory).rstrip("/") + "/"
            images.extend(
                line for line in output.splitlines() if line.startswith(prefix)
            )
        return images

def build_lister(config: ListerConfig) -> Lister:
    """Create the lister selected by the configuration."""
    if config.mode == "query":
        return QueryLister(config.query_command)
    return DirectoryLister(config.include)
