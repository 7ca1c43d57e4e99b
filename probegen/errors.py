"""Exceptions raised while generating probe bindings.

Every stage fails on the first problem it finds; nothing is recovered.

- ParseError: malformed provider or probe syntax
- EmitError: names that cannot be rendered, symbol collisions
- UnsupportedTypeError: argument type outside the type table
- ToolError: failure of an external tool run by the builder
"""


class ProbegenError(Exception):
    """Base exception for probegen errors."""


class ParseError(ProbegenError):
    """Malformed provider definition text."""

    def __init__(self, message: str, text: str, offset: int):
        self.message = message
        self.offset = offset
        self.line = text.count("\n", 0, offset) + 1
        line_start = text.rfind("\n", 0, offset) + 1
        line_end = text.find("\n", offset)
        if line_end < 0:
            line_end = len(text)
        self.column = offset - line_start + 1
        self.source_line = text[line_start:line_end]
        self.fragment = text[offset:line_end][:32]
        super().__init__(f"{self.line}:{self.column}: {message}")

    def format(self) -> str:
        """Format the error with the offending source line and a caret."""
        return "\n".join([
            str(self),
            f"{self.line:>4} | {self.source_line}",
            f"     | {' ' * (self.column - 1)}^",
        ])


class EmitError(ProbegenError):
    """Script cannot be turned into consistent generated sources."""


class UnsupportedTypeError(EmitError):
    """Type spelling outside the closed type table."""

    def __init__(self, spelling: str):
        self.spelling = spelling
        super().__init__(f"unsupported probe argument type: {spelling!r}")


class ToolError(ProbegenError):
    """External tool exited with an error."""

    def __init__(self, command: list[str], returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"{command[0]} exited with status {returncode}"
        if output:
            message = f"{message}:\n{output.rstrip()}"
        super().__init__(message)
