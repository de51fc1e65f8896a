"""
pystep

A small interpreter for an integer/lambda expression language evaluated
under composable effects: environment lookup, typed failure, a step counter,
an access log and a literal trace with optional output.

This module provides the public API.
"""

from __future__ import annotations

#==============================================================================
# Types
#==============================================================================

from pystep.types import (
    # Expressions
    Expr,
    LitExpr,
    VarExpr,
    AddExpr,
    AbsExpr,
    AppExpr,
    # Values
    Value,
    IntVal,
    ClosureVal,
    ErrorVal,
    # Constructors
    lit,
    var,
    add,
    abstraction,
    app,
    int_val,
    closure_val,
    error_val,
    # Guards and utilities
    is_int,
    is_closure,
    is_error,
    free_variables,
    is_closed,
    count_nodes,
    format_expr,
    format_value,
)

#==============================================================================
# Environment
#==============================================================================

from pystep.env import (
    ValueEnv,
    empty_value_env,
    lookup,
    bind,
)

#==============================================================================
# Errors
#==============================================================================

from pystep.errors import (
    ErrorCodes,
    EvalError,
    ValidationError,
    ValidationResult,
)

#==============================================================================
# Effects
#==============================================================================

from pystep.effects import (
    Capability,
    EffectMode,
    EffectState,
    EffectContext,
    OutputSink,
    buffer_sink,
    print_sink,
    create_effect_context,
    mode_capabilities,
)

#==============================================================================
# Evaluation
#==============================================================================

from pystep.evaluator import (
    Evaluator,
    EvalOptions,
    RunResult,
    create_evaluator,
    evaluate,
    run,
)

#==============================================================================
# Validation
#==============================================================================

from pystep.validator import (
    validate_expr,
    validate_closed,
)


__version__ = "0.1.0"

__all__ = [
    #==========================================================================
    # Types
    #==========================================================================
    "Expr",
    "LitExpr",
    "VarExpr",
    "AddExpr",
    "AbsExpr",
    "AppExpr",
    "Value",
    "IntVal",
    "ClosureVal",
    "ErrorVal",
    "lit",
    "var",
    "add",
    "abstraction",
    "app",
    "int_val",
    "closure_val",
    "error_val",
    "is_int",
    "is_closure",
    "is_error",
    "free_variables",
    "is_closed",
    "count_nodes",
    "format_expr",
    "format_value",
    #==========================================================================
    # Environment
    #==========================================================================
    "ValueEnv",
    "empty_value_env",
    "lookup",
    "bind",
    #==========================================================================
    # Errors
    #==========================================================================
    "ErrorCodes",
    "EvalError",
    "ValidationError",
    "ValidationResult",
    #==========================================================================
    # Effects
    #==========================================================================
    "Capability",
    "EffectMode",
    "EffectState",
    "EffectContext",
    "OutputSink",
    "buffer_sink",
    "print_sink",
    "create_effect_context",
    "mode_capabilities",
    #==========================================================================
    # Evaluation
    #==========================================================================
    "Evaluator",
    "EvalOptions",
    "RunResult",
    "create_evaluator",
    "evaluate",
    "run",
    #==========================================================================
    # Validation
    #==========================================================================
    "validate_expr",
    "validate_closed",
]
