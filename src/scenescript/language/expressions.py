"""Small expression language used by `if` conditions and `$` statements.

The grammar below is the whole language; `_TreeBuilder` turns a parse tree
into the node classes further down, which evaluate against a variable
mapping. Names are looked up in that mapping and nothing else is reachable
from an expression.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Mapping, MutableMapping, Sequence, Set

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from scenescript.core.types import Value
from scenescript.language.errors import (
    ExpressionError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    UnresolvedNameError,
)

expression_grammar = Grammar(
    r"""
    expression  = _ or_expr _
    statement   = _ (assignment / or_expr) _
    assignment  = name _ assign_op _ or_expr

    or_expr     = and_expr (_ or_op _ and_expr)*
    and_expr    = not_expr (_ and_op _ not_expr)*
    not_expr    = (not_op _ not_expr) / comparison
    # chained: a < b <= c
    comparison  = sum (_ compare_op _ sum)*
    sum         = term (_ add_op _ term)*
    term        = unary (_ mul_op _ unary)*
    unary       = (sign _ unary) / atom
    atom        = number / string / boolean / name / group
    group       = "(" _ or_expr _ ")"

    assign_op   = "+=" / "-=" / "*=" / "/=" / ~r"=(?!=)"
    or_op       = ~r"or\b" / "||"
    and_op      = ~r"and\b" / "&&"
    not_op      = ~r"not\b" / ~r"!(?!=)"
    compare_op  = "<=" / ">=" / "==" / "!=" / "<" / ">"
    add_op      = "+" / "-"
    mul_op      = "//" / "*" / "/" / "%"
    sign        = "-" / "+"

    number      = ~r"\d+\.\d*|\.\d+|\d+"
    string      = dq_string / sq_string
    dq_string   = ~r'"(?:[^"\\]|\\.)*"'
    sq_string   = ~r"'(?:[^'\\]|\\.)*'"
    boolean     = ~r"(?:True|true|False|false)\b"
    name        = !keyword ~r"[A-Za-z_][A-Za-z0-9_]*"
    keyword     = ~r"(?:and|or|not|None|True|true|False|false)\b"
    _           = ~r"\s*"
    """
)

MAX_NESTING = 20

_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t"}
_BOOLEAN_WORDS = {"True": True, "true": True, "False": False, "false": False}
# arithmetic on script values can still blow up in the host interpreter
_EVALUATION_FAILURES = (OverflowError, RecursionError, ValueError)


# --- syntax tree -----------------------------------------------------------


class Node:
    """Base class for expression tree nodes."""

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        raise NotImplementedError

    def names(self) -> Set[str]:
        return set()


@dataclass(slots=True)
class Literal(Node):
    value: Value

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        return self.value


@dataclass(slots=True)
class Name(Node):
    identifier: str

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        try:
            return variables[self.identifier]
        except KeyError as exc:
            raise UnresolvedNameError(f"name '{self.identifier}' is not defined") from exc

    def names(self) -> Set[str]:
        return {self.identifier}


@dataclass(slots=True)
class Unary(Node):
    operator: str
    operand: Node

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        value = self.operand.evaluate(variables)
        if self.operator in ("not", "!"):
            return not value
        number = _require_number(value, self.operator)
        return -number if self.operator == "-" else +number

    def names(self) -> Set[str]:
        return self.operand.names()


@dataclass(slots=True)
class Binary(Node):
    operator: str
    left: Node
    right: Node

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        return apply_binary(self.operator, self.left.evaluate(variables), self.right.evaluate(variables))

    def names(self) -> Set[str]:
        return self.left.names() | self.right.names()


@dataclass(slots=True)
class Logical(Node):
    operator: str
    left: Node
    right: Node

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        left = self.left.evaluate(variables)
        if self.operator in ("and", "&&"):
            return self.right.evaluate(variables) if left else left
        return left if left else self.right.evaluate(variables)

    def names(self) -> Set[str]:
        return self.left.names() | self.right.names()


@dataclass(slots=True)
class Comparison(Node):
    """Chained comparison, `a < b <= c` meaning `a < b and b <= c`."""

    first: Node
    operators: Sequence[str]
    rest: Sequence[Node]

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        left = self.first.evaluate(variables)
        for operator, node in zip(self.operators, self.rest):
            right = node.evaluate(variables)
            if not _compare(operator, left, right):
                return False
            left = right
        return True

    def names(self) -> Set[str]:
        found = self.first.names()
        for node in self.rest:
            found |= node.names()
        return found


# --- operator semantics ----------------------------------------------------


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float))


def _require_number(value: Value, operator: str) -> int | float:
    if not _is_number(value):
        raise ExpressionTypeError(f"unsupported operand {value!r} for '{operator}'")
    return value  # type: ignore[return-value]


def _divide(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise ExpressionError("division by zero")
    return left / right


def _floor_divide(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise ExpressionError("division by zero")
    return left // right


def _modulo(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise ExpressionError("modulo by zero")
    return left % right


_ARITHMETIC: Dict[str, Callable[[int | float, int | float], int | float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
    "//": _floor_divide,
    "%": _modulo,
}


def apply_binary(operator: str, left: Value, right: Value) -> Value:
    """Apply an arithmetic operator with the language's type rules."""
    if operator == "+" and isinstance(left, str) and isinstance(right, str):
        return left + right
    if not (_is_number(left) and _is_number(right)):
        raise ExpressionTypeError(f"unsupported operands {left!r} and {right!r} for '{operator}'")
    return _ARITHMETIC[operator](left, right)  # type: ignore[arg-type]


def _compare(operator: str, left: Value, right: Value) -> bool:
    if operator == "==":
        return left == right
    if operator == "!=":
        return left != right
    comparable = (_is_number(left) and _is_number(right)) or (isinstance(left, str) and isinstance(right, str))
    if not comparable:
        raise ExpressionTypeError(f"cannot compare {left!r} and {right!r} with '{operator}'")
    if operator == "<":
        return left < right  # type: ignore[operator]
    if operator == ">":
        return left > right  # type: ignore[operator]
    if operator == "<=":
        return left <= right  # type: ignore[operator]
    return left >= right  # type: ignore[operator]



# --- parse tree to syntax tree ---------------------------------------------


@dataclass(slots=True)
class Assignment:
    """`name op value` statement, where op is `=` or an augmented form."""

    target: str
    operator: str
    value: Node


def _repeats(visited: object) -> list:
    # an empty `*` repetition visits to the bare parse node
    return visited if isinstance(visited, list) else []


class _TreeBuilder(NodeVisitor):
    unwrapped_exceptions = (ExpressionError, RecursionError)

    def visit_expression(self, node, visited_children):
        _, tree, _ = visited_children
        return tree

    def visit_statement(self, node, visited_children):
        _, (tree,), _ = visited_children
        return tree

    def visit_assignment(self, node, visited_children):
        target, _, operator, _, value = visited_children
        return Assignment(target=target.identifier, operator=operator, value=value)

    def visit_or_expr(self, node, visited_children):
        tree, rest = visited_children
        for _, operator, _, operand in _repeats(rest):
            tree = Logical(operator, tree, operand)
        return tree

    visit_and_expr = visit_or_expr

    def visit_not_expr(self, node, visited_children):
        (inner,) = visited_children
        if isinstance(inner, list):
            operator, _, operand = inner
            return Unary(operator, operand)
        return inner

    visit_unary = visit_not_expr

    def visit_comparison(self, node, visited_children):
        first, rest = visited_children
        pairs = _repeats(rest)
        if not pairs:
            return first
        return Comparison(first, [pair[1] for pair in pairs], [pair[3] for pair in pairs])

    def visit_sum(self, node, visited_children):
        tree, rest = visited_children
        for _, operator, _, operand in _repeats(rest):
            tree = Binary(operator, tree, operand)
        return tree

    visit_term = visit_sum

    def visit_atom(self, node, visited_children):
        (inner,) = visited_children
        return inner

    def visit_group(self, node, visited_children):
        _, _, tree, _, _ = visited_children
        return tree

    def visit_number(self, node, visited_children):
        text = node.text
        try:
            return Literal(float(text) if "." in text else int(text))
        except ValueError as exc:
            raise ExpressionSyntaxError(f"Number literal too large: {text[:20]}...") from exc

    def visit_string(self, node, visited_children):
        body = node.text[1:-1]
        return Literal(_ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body))

    def visit_boolean(self, node, visited_children):
        return Literal(_BOOLEAN_WORDS[node.text])

    def visit_name(self, node, visited_children):
        return Name(node.text)

    def _operator(self, node, visited_children):
        return node.text

    visit_assign_op = visit_or_op = visit_and_op = visit_not_op = _operator
    visit_compare_op = visit_add_op = visit_mul_op = visit_sign = _operator

    def generic_visit(self, node, visited_children):
        return visited_children or node


_builder = _TreeBuilder()


def _nesting_depth(source: str) -> int:
    depth = deepest = 0
    for char in source:
        if char == "(":
            depth += 1
            deepest = max(deepest, depth)
        elif char == ")":
            depth -= 1
    return deepest


@lru_cache(maxsize=512)
def _build(rule: str, source: str) -> Node | Assignment:
    if _nesting_depth(source) > MAX_NESTING:
        raise ExpressionSyntaxError(f"Expression nested deeper than {MAX_NESTING} levels: {source[:40]!r}")
    try:
        return _builder.visit(expression_grammar[rule].parse(source))
    except ParseError as exc:
        raise ExpressionSyntaxError(f"Cannot parse {source!r}: {exc}") from exc
    except RecursionError as exc:
        raise ExpressionSyntaxError(f"Expression too deeply nested: {source[:40]!r}") from exc


@dataclass(slots=True)
class Expression:
    """Compiled expression ready to evaluate against any variable store."""

    source: str
    root: Node

    def evaluate(self, variables: Mapping[str, Value]) -> Value:
        try:
            return self.root.evaluate(variables)
        except _EVALUATION_FAILURES as exc:
            raise ExpressionError(f"Cannot evaluate {self.source!r}: {exc}") from exc

    def names(self) -> Set[str]:
        """Return every identifier the expression reads."""
        return self.root.names()


def compile_expression(source: str) -> Expression:
    """Parse an expression, raising ExpressionSyntaxError on malformed input."""
    return Expression(source=source, root=_build("expression", source))


def evaluate(source: str, variables: Mapping[str, Value]) -> Value:
    """Compile and evaluate an expression in one step."""
    return compile_expression(source).evaluate(variables)


def evaluate_condition(source: str, variables: Mapping[str, Value]) -> bool:
    """Evaluate an `if` condition to a boolean."""
    return bool(evaluate(source, variables))


def execute_statement(source: str, variables: MutableMapping[str, Value]) -> Value:
    """Run a `$` statement against the store and return the value it produced.

    `name = expr` binds (or creates) a variable; the augmented forms update an
    existing one. A bare expression is evaluated and leaves the store alone.
    The store is only written once the right-hand side evaluated cleanly.
    """
    tree = _build("statement", source)
    if not isinstance(tree, Assignment):
        return Expression(source=source, root=tree).evaluate(variables)
    value = Expression(source=source, root=tree.value).evaluate(variables)
    if tree.operator != "=":
        if tree.target not in variables:
            raise UnresolvedNameError(f"name '{tree.target}' is not defined")
        try:
            value = apply_binary(tree.operator[0], variables[tree.target], value)
        except _EVALUATION_FAILURES as exc:
            raise ExpressionError(f"Cannot evaluate {source!r}: {exc}") from exc
    variables[tree.target] = value
    return value
