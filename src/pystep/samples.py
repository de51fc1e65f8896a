"""
Named sample expressions for the CLI and tests.
"""

from __future__ import annotations
from typing import Dict

from pystep.types import Expr, abstraction, add, app, lit, var


# 12 + ((\x. x) (4 + 2))  ==> 18
example_expr: Expr = add(
    lit(12),
    app(abstraction("x", var("x")), add(lit(4), lit(2))),
)

SAMPLES: Dict[str, Expr] = {
    "example": example_expr,
    "literal": lit(5),
    "unbound": var("x"),
    "add-type-error": add(lit(1), abstraction("x", var("x"))),
    "app-type-error": app(lit(1), lit(2)),
    # (\x. \y. x) 1 2  ==> 1
    "const": app(app(abstraction("x", abstraction("y", var("x"))), lit(1)), lit(2)),
    # Free y in the body resolves against the closure's own environment
    "lexical-scope": app(
        abstraction("y", app(abstraction("x", add(var("x"), var("y"))), lit(1))),
        lit(10),
    ),
    # (\x. x x) (\x. x x) never terminates
    "omega": app(
        abstraction("x", app(var("x"), var("x"))),
        abstraction("x", app(var("x"), var("x"))),
    ),
}


def get_sample(name: str) -> Expr | None:
    """Look up a sample expression by name"""
    return SAMPLES.get(name)
