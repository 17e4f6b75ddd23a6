from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    UNKNOWN = 1
    INVALID_ARGS = 2
    CONFIG_INVALID = 3
    FETCH_FAILED = 4
    PARSE_FAILED = 5
    WRITE_FAILED = 6


class JobSnapError(Exception):
    """An error the CLI reports with a specific exit code."""

    def __init__(self, message: str, exit_code: ExitCode = ExitCode.UNKNOWN) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class FetchError(JobSnapError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ExitCode.FETCH_FAILED)
