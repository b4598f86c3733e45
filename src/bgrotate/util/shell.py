# src/bgrotate/util/shell.py: Subprocess execution wrapper.
# External tools (the wallpaper setter, the filesystem query command) are run
# through run_command, which applies a timeout and maps every way a command can
# fail onto ExternalCallError so callers only handle one exception type.

import subprocess
from typing import List

from .errors import ExternalCallError

def run_command(args: List[str], timeout: int = 60) -> str:
    """
    Run a command and return its standard output.

    Raises:
        ExternalCallError: If the binary is missing, exits non-zero, or times out.
    """
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
        return result.stdout
    except FileNotFoundError:
        raise ExternalCallError(f"The '{args[0]}' command was not found. Is it installed and in your PATH?")
    except subprocess.CalledProcessError as e:
        error_message = (e.stderr or "").strip() or (e.stdout or "").strip()
        raise ExternalCallError(
            f"Command '{' '.join(args)}' failed with exit code {e.returncode}: {error_message}"
        )
    except subprocess.TimeoutExpired:
        raise ExternalCallError(f"Command '{' '.join(args)}' timed out after {timeout} seconds.")
