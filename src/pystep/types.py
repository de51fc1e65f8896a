"""
pystep Type Definitions
Expression AST and Value domains for the step-by-step evaluator

This module provides frozen dataclasses for immutable expression and value
representations, using Union types with Literal 'kind' fields for pattern
matching.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    FrozenSet,
    Literal,
    Optional,
    TypeAlias,
    Union,
)

if TYPE_CHECKING:
    from pystep.env import ValueEnv


#==============================================================================
# Expression AST (e - syntactic expressions)
#==============================================================================

@dataclass(frozen=True)
class LitExpr:
    """Integer literal expression"""
    kind: Literal["lit"]
    value: int


@dataclass(frozen=True)
class VarExpr:
    """Variable reference expression"""
    kind: Literal["var"]
    name: str


@dataclass(frozen=True)
class AddExpr:
    """Integer addition expression"""
    kind: Literal["add"]
    left: Expr
    right: Expr


@dataclass(frozen=True)
class AbsExpr:
    """Single-parameter function abstraction"""
    kind: Literal["abs"]
    param: str
    body: Expr


@dataclass(frozen=True)
class AppExpr:
    """Function application expression"""
    kind: Literal["app"]
    fn: Expr
    arg: Expr


# Expression union
Expr: TypeAlias = Union[
    LitExpr,
    VarExpr,
    AddExpr,
    AbsExpr,
    AppExpr,
]


#==============================================================================
# Value Domain (v - runtime values)
#==============================================================================

@dataclass(frozen=True)
class IntVal:
    """Integer value"""
    kind: Literal["int"]
    value: int


@dataclass(frozen=True)
class ClosureVal:
    """
    Closure value.

    Holds the environment in effect where the abstraction was evaluated,
    so free variables of the body resolve lexically.
    """
    kind: Literal["closure"]
    env: ValueEnv
    param: str
    body: Expr


# Value union
Value: TypeAlias = Union[
    IntVal,
    ClosureVal,
]


@dataclass(frozen=True)
class ErrorVal:
    """Error value returned in place of a result when evaluation fails"""
    kind: Literal["error"]
    code: str
    message: Optional[str] = None
    detail: Optional[str] = None


#==============================================================================
# Expression Constructors
#==============================================================================

def lit(value: int) -> LitExpr:
    return LitExpr(kind="lit", value=value)


def var(name: str) -> VarExpr:
    return VarExpr(kind="var", name=name)


def add(left: Expr, right: Expr) -> AddExpr:
    return AddExpr(kind="add", left=left, right=right)


def abstraction(param: str, body: Expr) -> AbsExpr:
    return AbsExpr(kind="abs", param=param, body=body)


def app(fn: Expr, arg: Expr) -> AppExpr:
    return AppExpr(kind="app", fn=fn, arg=arg)


#==============================================================================
# Value Constructors
#==============================================================================

def int_val(value: int) -> IntVal:
    return IntVal(kind="int", value=value)


def closure_val(env: ValueEnv, param: str, body: Expr) -> ClosureVal:
    return ClosureVal(kind="closure", env=env, param=param, body=body)


def error_val(code: str, message: Optional[str] = None,
              detail: Optional[str] = None) -> ErrorVal:
    return ErrorVal(kind="error", code=code, message=message, detail=detail)


#==============================================================================
# Type Guards
#==============================================================================

def is_int(v: Union[Value, ErrorVal]) -> bool:
    """Check if value is an integer"""
    return v.kind == "int"


def is_closure(v: Union[Value, ErrorVal]) -> bool:
    """Check if value is a closure"""
    return v.kind == "closure"


def is_error(v: Union[Value, ErrorVal]) -> bool:
    """Check if value is an error"""
    return v.kind == "error"


#==============================================================================
# Structural Inspection
#==============================================================================

def free_variables(expr: Expr) -> FrozenSet[str]:
    """
    Collect the names referenced by an expression but not bound within it.

    Args:
        expr: Expression to inspect

    Returns:
        Set of free variable names
    """
    kind = expr.kind

    if kind == "lit":
        return frozenset()
    elif kind == "var":
        return frozenset({expr.name})
    elif kind == "add":
        return free_variables(expr.left) | free_variables(expr.right)
    elif kind == "abs":
        return free_variables(expr.body) - {expr.param}
    elif kind == "app":
        return free_variables(expr.fn) | free_variables(expr.arg)
    else:
        raise AssertionError(f"Unexpected value: {expr!r}")


def is_closed(expr: Expr) -> bool:
    """Check if an expression has no free variables"""
    return not free_variables(expr)


def count_nodes(expr: Expr) -> int:
    """Count the AST nodes of an expression"""
    kind = expr.kind

    if kind in ("lit", "var"):
        return 1
    elif kind == "add":
        return 1 + count_nodes(expr.left) + count_nodes(expr.right)
    elif kind == "abs":
        return 1 + count_nodes(expr.body)
    elif kind == "app":
        return 1 + count_nodes(expr.fn) + count_nodes(expr.arg)
    else:
        raise AssertionError(f"Unexpected value: {expr!r}")


#==============================================================================
# Formatting
#==============================================================================

def format_expr(expr: Expr) -> str:
    """
    Format an expression as a lambda-calculus style string.

    Examples:
        add(lit(1), var("x"))              -> "(1 + x)"
        app(abstraction("x", var("x")), lit(2)) -> "((\\x. x) 2)"
    """
    kind = expr.kind

    if kind == "lit":
        return str(expr.value)
    elif kind == "var":
        return expr.name
    elif kind == "add":
        return f"({format_expr(expr.left)} + {format_expr(expr.right)})"
    elif kind == "abs":
        return f"(\\{expr.param}. {format_expr(expr.body)})"
    elif kind == "app":
        return f"({format_expr(expr.fn)} {format_expr(expr.arg)})"
    else:
        raise AssertionError(f"Unexpected value: {expr!r}")


def format_value(v: Union[Value, ErrorVal]) -> str:
    """Format a value for display"""
    if is_int(v):
        return str(v.value)
    if is_closure(v):
        return f"<closure \\{v.param}. {format_expr(v.body)}>"
    if is_error(v):
        return f"{v.code}: {v.message}" if v.message else v.code
    raise AssertionError(f"Unexpected value: {v!r}")
