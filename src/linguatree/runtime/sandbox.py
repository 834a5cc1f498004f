"""Restricted expression interpreter for template placeholders.

Evaluates Python expression syntax against a supplied data context only.
There is no access to builtins, modules, or private attributes: every name
resolves in the render context (or an enclosing template lambda), and every
node type outside a fixed grammar is refused when the template is compiled.

Grammar:
    literals, names, attribute access, subscripts/slices, calls (with * and
    ** unpacking), arithmetic/unary/boolean operators, comparisons,
    conditional expressions, list/tuple/set/dict displays, f-strings, and
    lambdas with plain positional parameters.

Limits:
    - Wall-clock deadline per evaluation, checked before every node and after
      every call. Host callables cannot be interrupted mid-call.
    - Nesting depth via DepthGuard (also bounds self-applying lambdas).
    - Bounded ** exponents, integer sizes and sequence repetition.
    - Padding widths (str.ljust and friends, format specs, printf-style
      widths) and str.replace growth are checked before the host call runs.
    - Attributes of functools.partial objects are unreadable, so bound
      arguments never leak into a template.

Thread Safety:
    Each evaluation creates its own _Evaluation state; SandboxEvaluator holds
    configuration only and is safe to share.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import ast
import functools
import operator as op
import re
import time
from collections import ChainMap
from collections.abc import Callable, Mapping
from typing import Any

from linguatree.constants import (
    DEFAULT_TEMPLATE_TIMEOUT,
    MAX_DEPTH,
    MAX_INT_BITS,
    MAX_POWER_EXPONENT,
    MAX_SEQUENCE_LENGTH,
)
from linguatree.core.depth_guard import DepthGuard
from linguatree.diagnostics import ErrorTemplate, I18nError

__all__ = [
    "Deadline",
    "SandboxEvaluator",
    "SandboxTimeoutError",
    "SandboxViolationError",
    "parse_expression",
    "validate_expression",
]

type Scope = ChainMap[str, Any]


class SandboxTimeoutError(I18nError):
    """Evaluation ran past its wall-clock deadline."""


class SandboxViolationError(I18nError):
    """Expression tried something outside the sandbox grammar."""


_BINARY_OPERATORS: Mapping[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.Pow: op.pow,
}

_UNARY_OPERATORS: Mapping[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.UAdd: op.pos,
    ast.USub: op.neg,
    ast.Not: op.not_,
    ast.Invert: op.invert,
}

_COMPARISON_OPERATORS: Mapping[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: op.eq,
    ast.NotEq: op.ne,
    ast.Lt: op.lt,
    ast.LtE: op.le,
    ast.Gt: op.gt,
    ast.GtE: op.ge,
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
    ast.Is: op.is_,
    ast.IsNot: op.is_not,
}

_ALLOWED_NODES: frozenset[type[ast.AST]] = frozenset({
    ast.Expression,
    ast.Constant,
    ast.Name,
    ast.Load,
    ast.Attribute,
    ast.Subscript,
    ast.Slice,
    ast.Call,
    ast.keyword,
    ast.Starred,
    ast.BinOp,
    ast.UnaryOp,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.Compare,
    ast.IfExp,
    ast.List,
    ast.Tuple,
    ast.Set,
    ast.Dict,
    ast.JoinedStr,
    ast.FormattedValue,
    ast.Lambda,
    ast.arguments,
    ast.arg,
    *_BINARY_OPERATORS,
    *_UNARY_OPERATORS,
    *_COMPARISON_OPERATORS,
})

# str.format and friends can reach attributes through the format mini-language.
_FORBIDDEN_ATTRIBUTES: frozenset[str] = frozenset({"format", "format_map", "mro"})

# str/bytes methods whose integer argument sets the result length.
_WIDTH_METHODS: frozenset[str] = frozenset({"center", "ljust", "rjust", "zfill", "expandtabs"})

_FORMAT_NUMBER = re.compile(r"\d+")
# A printf conversion spec, or an escaped percent sign.
_PRINTF_SPEC = re.compile(r"%%|%(?:\([^)]*\))?[-#0 +]*(\d+|\*)?(?:\.(\d+|\*))?")


@functools.lru_cache(maxsize=512)
def parse_expression(expression: str) -> ast.Expression:
    """Parse and cache the AST for a placeholder expression.

    Args:
        expression: Expression text between the placeholder markers

    Returns:
        Validated AST Expression

    Raises:
        SyntaxError: If the text is not a Python expression
        SandboxViolationError: If the expression leaves the sandbox grammar
    """
    tree = ast.parse(expression.strip(), mode="eval")
    validate_expression(tree)
    return tree


def validate_expression(tree: ast.AST) -> None:
    """Reject node types and attribute names outside the sandbox grammar.

    Raises:
        SandboxViolationError: On the first disallowed construct
    """
    for node in ast.walk(tree):
        if type(node) not in _ALLOWED_NODES:
            raise SandboxViolationError(
                ErrorTemplate.forbidden_operation(
                    f"Unsupported syntax in template expression: {type(node).__name__}"
                )
            )
        match node:
            case ast.Attribute(attr=attr):
                _check_attribute_name(attr)
            case ast.Lambda(args=args) if (
                args.vararg or args.kwarg or args.kwonlyargs or args.defaults
            ):
                raise SandboxViolationError(
                    ErrorTemplate.forbidden_operation(
                        "Template lambdas accept plain positional parameters only"
                    )
                )


def _check_attribute_name(attr: str) -> None:
    if attr.startswith("_") or attr in _FORBIDDEN_ATTRIBUTES:
        raise SandboxViolationError(
            ErrorTemplate.forbidden_operation(f"Access to attribute '{attr}' is not allowed")
        )


class Deadline:
    """Wall-clock cutoff for one evaluation.

    Attributes:
        timeout: Budget in seconds
    """

    __slots__ = ("_expires_at", "timeout")

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout

    @property
    def remaining(self) -> float:
        """Seconds left before the cutoff (negative once expired)."""
        return self._expires_at - time.monotonic()

    def check(self) -> None:
        """Raise SandboxTimeoutError once the budget is spent."""
        if time.monotonic() > self._expires_at:
            raise SandboxTimeoutError(ErrorTemplate.template_timeout(self.timeout))


class SandboxEvaluator:
    """Evaluates parsed placeholder expressions under time and depth limits.

    Example:
        >>> evaluator = SandboxEvaluator(timeout=0.5)
        >>> tree = parse_expression("name.upper() + '!'")
        >>> evaluator.evaluate(tree, {"name": "ann"})
        'ANN!'
    """

    __slots__ = ("max_depth", "timeout")

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TEMPLATE_TIMEOUT,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        if timeout <= 0:
            msg = f"timeout must be positive, got {timeout}"
            raise ValueError(msg)
        self.timeout = timeout
        self.max_depth = max_depth

    def start(self, data: Mapping[str, Any]) -> _Evaluation:
        """Begin an evaluation: one deadline shared by every expression in a render."""
        return _Evaluation(
            ChainMap({}, dict(data)),
            Deadline(self.timeout),
            DepthGuard(max_depth=self.max_depth),
        )

    def evaluate(self, tree: ast.Expression, data: Mapping[str, Any]) -> Any:
        """Evaluate a single parsed expression against data."""
        return self.start(data).run(tree)


class _TemplateLambda:
    """Callable produced by a lambda inside a template.

    Runs its body under the evaluation that created it, so the deadline and
    depth limit still apply when host code (e.g. pluralize) calls it.
    """

    __slots__ = ("_evaluation", "_node", "_scope")

    def __init__(self, node: ast.Lambda, scope: Scope, evaluation: _Evaluation) -> None:
        self._node = node
        self._scope = scope
        self._evaluation = evaluation

    def __call__(self, *args: Any) -> Any:
        params = [a.arg for a in (*self._node.args.posonlyargs, *self._node.args.args)]
        if len(args) != len(params):
            msg = f"<lambda>() takes {len(params)} argument(s) but {len(args)} were given"
            raise TypeError(msg)
        local = self._scope.new_child(dict(zip(params, args, strict=True)))
        return self._evaluation.eval(self._node.body, local)

    def __repr__(self) -> str:
        return "<template lambda>"


class _Evaluation:
    """Per-evaluation state: data scope, deadline and depth guard."""

    __slots__ = ("deadline", "guard", "scope")

    def __init__(self, scope: Scope, deadline: Deadline, guard: DepthGuard) -> None:
        self.scope = scope
        self.deadline = deadline
        self.guard = guard

    def run(self, tree: ast.Expression) -> Any:
        return self.eval(tree.body, self.scope)

    def eval(self, node: ast.expr, scope: Scope) -> Any:
        self.deadline.check()
        with self.guard:
            return self._dispatch(node, scope)

    def _dispatch(self, node: ast.expr, scope: Scope) -> Any:  # noqa: PLR0911, PLR0912
        match node:
            case ast.Constant(value=value):
                return value
            case ast.Name(id=name):
                return self._lookup(name, scope)
            case ast.Attribute(value=target, attr=attr):
                return self._attribute(self.eval(target, scope), attr)
            case ast.Subscript(value=target, slice=index):
                return self.eval(target, scope)[self.eval(index, scope)]
            case ast.Slice(lower=lower, upper=upper, step=step):
                return slice(
                    None if lower is None else self.eval(lower, scope),
                    None if upper is None else self.eval(upper, scope),
                    None if step is None else self.eval(step, scope),
                )
            case ast.Call():
                return self._call(node, scope)
            case ast.BinOp(left=left, op=operator, right=right):
                return self._binary(operator, self.eval(left, scope), self.eval(right, scope))
            case ast.UnaryOp(op=operator, operand=operand):
                return _UNARY_OPERATORS[type(operator)](self.eval(operand, scope))
            case ast.BoolOp(op=ast.And(), values=values):
                result = None
                for value in values:
                    result = self.eval(value, scope)
                    if not result:
                        return result
                return result
            case ast.BoolOp(op=ast.Or(), values=values):
                result = None
                for value in values:
                    result = self.eval(value, scope)
                    if result:
                        return result
                return result
            case ast.Compare():
                return self._compare(node, scope)
            case ast.IfExp(test=test, body=body, orelse=orelse):
                return self.eval(body if self.eval(test, scope) else orelse, scope)
            case ast.List(elts=elts):
                return self._elements(elts, scope)
            case ast.Tuple(elts=elts):
                return tuple(self._elements(elts, scope))
            case ast.Set(elts=elts):
                return set(self._elements(elts, scope))
            case ast.Dict(keys=keys, values=values):
                result: dict[Any, Any] = {}
                for key, value in zip(keys, values, strict=True):
                    if key is None:
                        result.update(self.eval(value, scope))
                    else:
                        result[self.eval(key, scope)] = self.eval(value, scope)
                return result
            case ast.JoinedStr(values=values):
                return "".join(str(self.eval(value, scope)) for value in values)
            case ast.FormattedValue():
                return self._formatted(node, scope)
            case ast.Lambda():
                return _TemplateLambda(node, scope, self)
            case _:
                raise SandboxViolationError(
                    ErrorTemplate.forbidden_operation(
                        f"Unsupported syntax in template expression: {type(node).__name__}"
                    )
                )

    @staticmethod
    def _lookup(name: str, scope: Scope) -> Any:
        try:
            return scope[name]
        except KeyError:
            msg = f"name '{name}' is not defined"
            raise NameError(msg) from None

    @staticmethod
    def _attribute(target: Any, attr: str) -> Any:
        _check_attribute_name(attr)
        if isinstance(target, Mapping) and attr in target:
            return target[attr]
        if isinstance(target, functools.partial):
            raise SandboxViolationError(
                ErrorTemplate.forbidden_operation(
                    f"Access to attribute '{attr}' of a partial function is not allowed"
                )
            )
        return getattr(target, attr)

    def _elements(self, elts: list[ast.expr], scope: Scope) -> list[Any]:
        items: list[Any] = []
        for elt in elts:
            if isinstance(elt, ast.Starred):
                items.extend(self.eval(elt.value, scope))
            else:
                items.append(self.eval(elt, scope))
        return items

    def _call(self, node: ast.Call, scope: Scope) -> Any:
        func = self.eval(node.func, scope)
        if not callable(func):
            msg = f"'{type(func).__name__}' object is not callable"
            raise TypeError(msg)
        if isinstance(func, type):
            raise SandboxViolationError(
                ErrorTemplate.forbidden_operation("Calling classes is not allowed in templates")
            )

        args = self._elements(node.args, scope)
        kwargs: dict[str, Any] = {}
        for keyword in node.keywords:
            if keyword.arg is None:
                kwargs.update(self.eval(keyword.value, scope))
            else:
                kwargs[keyword.arg] = self.eval(keyword.value, scope)

        _check_call_size(func, args, kwargs)
        result = func(*args, **kwargs)
        self.deadline.check()
        return result

    @staticmethod
    def _binary(operator: ast.operator, left: Any, right: Any) -> Any:
        match operator:
            case ast.Pow() if isinstance(right, int | float) and abs(right) > MAX_POWER_EXPONENT:
                raise SandboxViolationError(
                    ErrorTemplate.forbidden_operation(
                        f"Exponent {right} exceeds the limit of {MAX_POWER_EXPONENT}"
                    )
                )
            case ast.Pow() if _is_int(left) and _is_int(right) and right > 0:
                _check_int_bits(abs(left).bit_length() * right)
            case ast.Mult() if _is_int(left) and _is_int(right):
                _check_int_bits(abs(left).bit_length() + abs(right).bit_length())
            case ast.Mult():
                _check_repetition(left, right)
                _check_repetition(right, left)
            case ast.Mod() if isinstance(left, str | bytes):
                _check_printf_widths(left, right)
        return _BINARY_OPERATORS[type(operator)](left, right)

    def _compare(self, node: ast.Compare, scope: Scope) -> bool:
        left = self.eval(node.left, scope)
        for operator, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.eval(comparator, scope)
            if not _COMPARISON_OPERATORS[type(operator)](left, right):
                return False
            left = right
        return True

    def _formatted(self, node: ast.FormattedValue, scope: Scope) -> str:
        value = self.eval(node.value, scope)
        match node.conversion:
            case 115:  # !s
                value = str(value)
            case 114:  # !r
                value = repr(value)
            case 97:  # !a
                value = ascii(value)
        spec = "" if node.format_spec is None else self.eval(node.format_spec, scope)
        _check_format_numbers(spec)
        return format(value, spec)


def _check_repetition(sequence: Any, times: Any) -> None:
    if (
        isinstance(sequence, str | bytes | list | tuple)
        and isinstance(times, int)
        and len(sequence) * times > MAX_SEQUENCE_LENGTH
    ):
        raise SandboxViolationError(
            ErrorTemplate.forbidden_operation(
                f"Sequence repetition would exceed {MAX_SEQUENCE_LENGTH} items"
            )
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int)


def _check_int_bits(bits: int) -> None:
    if bits > MAX_INT_BITS:
        raise SandboxViolationError(
            ErrorTemplate.forbidden_operation(
                f"Integer result would exceed {MAX_INT_BITS} bits"
            )
        )


def _check_length(length: int) -> None:
    if length > MAX_SEQUENCE_LENGTH:
        raise SandboxViolationError(
            ErrorTemplate.forbidden_operation(
                f"Result would exceed {MAX_SEQUENCE_LENGTH} characters"
            )
        )


def _check_format_numbers(spec: str) -> None:
    for number in _FORMAT_NUMBER.findall(spec):
        _check_length(int(number))


def _check_printf_widths(template: str | bytes, values: Any) -> None:
    if isinstance(template, bytes):
        template = template.decode("ascii", "replace")
    starred = False
    for match in _PRINTF_SPEC.finditer(template):
        for number in match.groups():
            if number == "*":
                starred = True
            elif number:
                _check_length(int(number))
    if starred:
        items = values if isinstance(values, tuple) else (values,)
        for item in items:
            if _is_int(item):
                _check_length(abs(item))


def _check_call_size(func: Any, args: list[Any], kwargs: Mapping[str, Any]) -> None:
    """Estimate the output of str/bytes methods that grow their receiver."""
    owner = getattr(func, "__self__", None)
    if not isinstance(owner, str | bytes | bytearray):
        return
    name = getattr(func, "__name__", "")
    if name in _WIDTH_METHODS:
        widths = [value for value in (*args, *kwargs.values()) if _is_int(value)]
        if widths:
            width = max(widths)
            _check_length(width * len(owner) if name == "expandtabs" else width)
    elif name == "replace" and len(args) >= 2:
        new = args[1]
        if isinstance(new, str | bytes | bytearray):
            _check_length(len(owner) + (len(owner) + 1) * len(new))
