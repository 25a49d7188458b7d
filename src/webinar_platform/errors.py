"""Exception hierarchy for the webinar platform."""


class WebinarPlatformError(Exception):
    """Base class for all platform errors."""


class PresentationError(WebinarPlatformError):
    """A slide deck could not be turned into slides."""


class UnsupportedFormatError(PresentationError):
    """The file extension has no matching parser."""


class PresentationParseError(PresentationError):
    """The container (ZIP/PDF) could not be opened or parsed.

    Fatal for the whole analysis.
    """


class ToolError(WebinarPlatformError):
    """An external command-line tool failed.

    Localized to the step that invoked it; callers degrade instead of failing.
    """

    def __init__(self, message: str, command: str = "", stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stdout = stdout
        self.stderr = stderr


class ToolNotFoundError(ToolError):
    """The binary is not installed or not on PATH."""


class ToolTimeoutError(ToolError):
    """The tool exceeded its timeout and was killed."""


class ToolExitError(ToolError):
    """The tool exited with a non-zero status."""

    def __init__(self, message: str, returncode: int, **kwargs):
        super().__init__(message, **kwargs)
        self.returncode = returncode


class WebinarNotFoundError(WebinarPlatformError):
    """No webinar with the requested id exists."""


class SubmissionError(WebinarPlatformError):
    """A quiz submission is incomplete or malformed."""
