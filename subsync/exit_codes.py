"""
Exit codes and fatal errors for subsync commands.

Per-entry failures never end a run; only the errors below do.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error
PARTIAL_SUCCESS = 71     # Some entries synced, some failed (--strict only)
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exceptions that escape a command without carrying their own code
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': GENERAL_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """Exit code for ``exc``: its own for a CommandError, else by class name."""
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """A fatal error with the exit code the CLI should end with."""
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NotInRepositoryError(CommandError):
    """Raised when the working directory is not inside a git repository."""
    def __init__(self, message: str = (
            "Not in a Git repository. Please run this command from within "
            "your parent Git repository.")):
        super().__init__(message, GENERAL_ERROR)


class ListFileError(CommandError):
    """Raised when the submodule list file cannot be read."""
    def __init__(self, path: str, reason: str = ""):
        message = f"Cannot read submodule list {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message, GENERAL_ERROR)
        self.path = path


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class PartialSuccessError(CommandError):
    """Raised when some entries succeed and some fail."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed
