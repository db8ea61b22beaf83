"""Script language: line classifier, block parser and expression evaluator."""

from .classifier import classify_line, strip_comment
from .errors import ExpressionError, ExpressionSyntaxError, ExpressionTypeError, UnresolvedNameError
from .expressions import compile_expression, evaluate, evaluate_condition, execute_statement
from .parser import ScriptParser, parse

__all__ = [
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionTypeError",
    "ScriptParser",
    "UnresolvedNameError",
    "classify_line",
    "compile_expression",
    "evaluate",
    "evaluate_condition",
    "execute_statement",
    "parse",
    "strip_comment",
]
