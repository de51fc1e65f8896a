# pystep Expression Validator
# Manual structural validation for caller-built expression trees

from __future__ import annotations

from typing import Any

from pystep.errors import ValidationError, ValidationResult
from pystep.types import (
    AbsExpr,
    AddExpr,
    AppExpr,
    LitExpr,
    VarExpr,
)


#==============================================================================
# Expression Kinds
#==============================================================================

_EXPR_CLASSES = {
    "lit": LitExpr,
    "var": VarExpr,
    "add": AddExpr,
    "abs": AbsExpr,
    "app": AppExpr,
}


#==============================================================================
# Validation State
#==============================================================================

class ValidationState:
    """State tracking during validation"""

    def __init__(self) -> None:
        self.errors: list[ValidationError] = []
        self.path: list[str] = ["$"]

    def push_path(self, segment: str) -> None:
        """Push a path segment onto the validation path"""
        self.path.append(segment)

    def pop_path(self) -> None:
        """Pop the last path segment from the validation path"""
        self.path.pop()

    def current_path(self) -> str:
        """Get the current validation path as a dot-separated string"""
        return ".".join(self.path)

    def add_error(self, message: str, value: Any | None = None) -> None:
        """Add a validation error to the state"""
        self.errors.append(ValidationError(
            path=self.current_path(),
            message=message,
            value=value,
        ))


#==============================================================================
# Primitive Validators
#==============================================================================

def validate_name(value: Any) -> bool:
    """Check if value is a non-empty string"""
    return isinstance(value, str) and value != ""


def validate_int(value: Any) -> bool:
    """Check if value is an integer (bool excluded)"""
    return isinstance(value, int) and not isinstance(value, bool)


#==============================================================================
# Expression Validation
#==============================================================================

def _validate_child(state: ValidationState, field_name: str, value: Any) -> bool:
    state.push_path(field_name)
    result = _validate_node(state, value)
    state.pop_path()
    return result


def _validate_node(state: ValidationState, value: Any) -> bool:
    kind = getattr(value, "kind", None)
    expected_cls = _EXPR_CLASSES.get(kind) if isinstance(kind, str) else None

    if expected_cls is None or not isinstance(value, expected_cls):
        state.add_error("Not an expression node", value)
        return False

    if kind == "lit":
        if not validate_int(value.value):
            state.add_error("lit value must be an integer", value.value)
            return False
        return True

    elif kind == "var":
        if not validate_name(value.name):
            state.push_path("name")
            state.add_error("Invalid variable name", value.name)
            state.pop_path()
            return False
        return True

    elif kind == "add":
        left_valid = _validate_child(state, "left", value.left)
        right_valid = _validate_child(state, "right", value.right)
        return left_valid and right_valid

    elif kind == "abs":
        param_valid = validate_name(value.param)
        if not param_valid:
            state.push_path("param")
            state.add_error("Invalid parameter name", value.param)
            state.pop_path()
        body_valid = _validate_child(state, "body", value.body)
        return param_valid and body_valid

    else:  # app
        fn_valid = _validate_child(state, "fn", value.fn)
        arg_valid = _validate_child(state, "arg", value.arg)
        return fn_valid and arg_valid


def validate_expr(expr: Any) -> ValidationResult:
    """
    Validate that a value is a well-formed expression tree.

    Args:
        expr: The candidate expression

    Returns:
        ValidationResult carrying the expression and any errors
    """
    state = ValidationState()
    _validate_node(state, expr)

    return ValidationResult(expr=expr, errors=state.errors)


def validate_closed(expr: Any) -> ValidationResult:
    """
    Validate a well-formed expression that also has no free variables.

    Args:
        expr: The candidate expression

    Returns:
        ValidationResult with one error per free occurrence, at the
        path of the variable node
    """
    result = validate_expr(expr)
    if not result.valid:
        return result

    state = ValidationState()
    _collect_free(state, expr, frozenset())
    return ValidationResult(expr=expr, errors=state.errors)


def _collect_free(state: ValidationState, expr: Any, bound: frozenset) -> None:
    kind = expr.kind

    if kind == "var":
        if expr.name not in bound:
            state.add_error(f"Free variable: {expr.name}", expr.name)
    elif kind == "add":
        for field_name in ("left", "right"):
            state.push_path(field_name)
            _collect_free(state, getattr(expr, field_name), bound)
            state.pop_path()
    elif kind == "abs":
        state.push_path("body")
        _collect_free(state, expr.body, bound | {expr.param})
        state.pop_path()
    elif kind == "app":
        for field_name in ("fn", "arg"):
            state.push_path(field_name)
            _collect_free(state, getattr(expr, field_name), bound)
            state.pop_path()
