"""
Custom exception classes for python_redlines package.

Parse and internal errors abort a single operation and never leave partial
output behind. Missing parts are recoverable and only surface as
MissingPartError when the caller asks for strict handling.
"""


class RedlinesError(Exception):
    """Base exception for all python_redlines errors."""

    pass


class ParseError(RedlinesError):
    """Raised when an XML part cannot be parsed.

    Attributes:
        reason: Parser message describing the problem
        line: 1-based line of the error, if known
        column: 0-based column of the error, if known
        part: Package part the XML came from, if known
    """

    def __init__(
        self,
        reason: str,
        line: int | None = None,
        column: int | None = None,
        part: str | None = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        self.part = part
        super().__init__(reason)

    def __str__(self) -> str:
        # part is often filled in after the error is raised
        return self._format_message()

    def _format_message(self) -> str:
        """Format the parse error with whatever location is available."""
        msg = "XML parse error"
        if self.part:
            msg += f" in '{self.part}'"
        if self.line is not None:
            msg += f" at line {self.line}"
            if self.column is not None:
                msg += f", column {self.column}"
        return f"{msg}: {self.reason}"


class MissingPartError(RedlinesError):
    """Raised when a requested package part does not exist.

    Attributes:
        part: Name of the missing zip entry (e.g., "word/header1.xml")
    """

    def __init__(self, part: str) -> None:
        self.part = part
        super().__init__(f"Part '{part}' not found in package")


class UnsupportedInputTypeError(RedlinesError):
    """Raised when the input does not have the structure an operation expects.

    Attributes:
        input_type: The offending type or a description of the input
        reason: Additional context, such as an install hint
    """

    def __init__(self, input_type: str, reason: str | None = None) -> None:
        self.input_type = input_type
        self.reason = reason
        msg = f"Unsupported input type: {input_type}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class InternalError(RedlinesError):
    """Raised when processing fails for a reason other than bad input.

    The original exception is available as ``__cause__``.
    """

    pass


class PartCleanError(RedlinesError):
    """Raised when accepting changes in one package part fails.

    The package is left untouched when this is raised.

    Attributes:
        part: Name of the zip entry that failed
        error: The underlying ParseError or InternalError
    """

    def __init__(self, part: str, error: RedlinesError) -> None:
        self.part = part
        self.error = error
        super().__init__(f"Failed to clean '{part}': {error}")
