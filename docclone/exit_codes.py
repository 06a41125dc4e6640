"""
Standard exit codes for docclone commands.
"""

SUCCESS = 0              # Successful termination
USAGE_ERROR = 1          # Bad arguments or an unmet precondition
OPERATION_ERROR = 2      # Cloning, fetching or parsing failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = OPERATION_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class PreconditionError(CommandError):
    """Raised when a command cannot start, e.g. a missing local directory."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)
