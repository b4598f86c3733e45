# src/bgrotate/util/errors.py: Typed exceptions and exit codes.
# Every failure the daemon or the CLI can report is a subclass of
# BgRotateError. Each class carries the process exit code the CLI uses when the
# error reaches it; errors raised inside the rotation loop are logged there and
# never reach the CLI.

class BgRotateError(Exception):
    """Base exception for the application."""
    exit_code = 1

class ConfigError(BgRotateError):
    """Invalid configuration file or malformed command-line invocation."""
    exit_code = 1

class AlreadyRunningError(BgRotateError):
    """A lock record already exists, so another daemon owns the rotation."""
    exit_code = 2

class NotRunningError(BgRotateError):
    """No usable lock record; there is no daemon to signal."""
    exit_code = 1

class EmptyWorkspaceError(BgRotateError):
    """A workspace has no images even after a refill."""
    exit_code = 1

class ExternalCallError(BgRotateError):
    """The lister or the wallpaper setter failed."""
    exit_code = 1
