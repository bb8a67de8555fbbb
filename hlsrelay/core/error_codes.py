"""
Standardised error handling for HLSRelay.
"""

from hlsrelay.core.constants import ErrorCode


class JobError(Exception):
    """Raised when a pipeline phase encounters a known error condition."""

    def __init__(self, code: str, message: str, output: str | None = None):
        self.code = code
        self.message = message
        # captured encoder/diagnostic output, never shown to the caller
        self.output = output
        super().__init__(f"[{code}] {message}")


def invalid_input(message: str) -> JobError:
    return JobError(ErrorCode.INVALID_INPUT, message)


def io_failure(message: str) -> JobError:
    return JobError(ErrorCode.IO_FAILURE, message)
