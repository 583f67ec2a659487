"""
Generation-specific exception classes.
"""


class GenerationError(Exception):
    """Base class for all sqlgen errors.
    """


class DescriptorError(GenerationError, ValueError):
    """Malformed operation descriptor; no statement is produced.
    """


class UnknownOperatorError(DescriptorError):
    """Raised when a predicate uses an operator the dialect cannot render."""

    def __init__(self, operator, supported: list[str] | None = None):
        self.operator = operator
        self.supported = supported or []

        message = f'Unknown operator: {operator!r}'
        if self.supported:
            message += f". Supported: {', '.join(self.supported)}"

        super().__init__(message)


class OptionConflictError(DescriptorError):
    """Query options that cannot be combined in a single statement.
    """


class TriggerDefinitionError(DescriptorError):
    """Unsupported trigger timing, event or empty event list.
    """


class TypeConversionError(GenerationError, TypeError):
    """Error converting a Python value to a value expression.
    """


class ArrayParseError(GenerationError, ValueError):
    """Raised when an array literal cannot be decoded."""

    def __init__(self, message: str, text: str | None = None, position: int | None = None):
        self.text = text
        self.position = position
        if position is not None:
            message = f'{message} (at position {position})'
        super().__init__(message)
