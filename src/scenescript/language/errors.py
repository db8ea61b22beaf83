"""Expression evaluation exceptions."""


class ExpressionError(Exception):
    """Base exception for expression parsing and evaluation."""


class ExpressionSyntaxError(ExpressionError):
    """Raised when an expression does not match the supported grammar."""


class UnresolvedNameError(ExpressionError):
    """Raised when an identifier is not present in the variable store."""


class ExpressionTypeError(ExpressionError):
    """Raised when an operator is applied to unsupported operand types."""
