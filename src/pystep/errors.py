# pystep Error Types
# Error domain for evaluation and validation errors

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

from pystep.types import ErrorVal, error_val


#==============================================================================
# Error Codes
#==============================================================================

class ErrorCodes(str, Enum):
    """Error code constants for pystep errors"""

    # Evaluation errors
    UNBOUND_VARIABLE = "UnboundVariable"
    TYPE_MISMATCH = "TypeMismatch"

    # Only raised when the caller sets a step limit
    NON_TERMINATION = "NonTermination"

    # The host interpreter ran out of stack for a deeply nested tree
    RECURSION_DEPTH = "RecursionDepth"


#==============================================================================
# Evaluation Error Class
#==============================================================================

class EvalError(Exception):
    """
    Evaluation failure.

    `detail` carries the offending variable name for UnboundVariable and the
    failing construct ("addition" or "application") for TypeMismatch.
    """

    def __init__(self, code: ErrorCodes, message: str, detail: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"EvalError({self.code.value}, {self.detail!r})"

    def to_value(self) -> ErrorVal:
        """Convert to ErrorVal representation"""
        return error_val(self.code.value, self.message, self.detail)

    #---------------------------------------------------------------------------
    # Static factory methods for common errors
    #---------------------------------------------------------------------------

    @staticmethod
    def unbound_variable(name: str) -> "EvalError":
        """Create an UnboundVariable error"""
        return EvalError(
            ErrorCodes.UNBOUND_VARIABLE,
            f"unbound variable: {name}",
            name,
        )

    @staticmethod
    def type_mismatch(operation: str) -> "EvalError":
        """Create a TypeMismatch error for "addition" or "application"."""
        return EvalError(
            ErrorCodes.TYPE_MISMATCH,
            f"type error in {operation}",
            operation,
        )

    @staticmethod
    def non_termination(max_steps: int) -> "EvalError":
        """Create a NonTermination error"""
        return EvalError(
            ErrorCodes.NON_TERMINATION,
            f"Expression evaluation exceeded {max_steps} steps",
        )

    @staticmethod
    def recursion_depth(visited: int) -> "EvalError":
        """Create a RecursionDepth error"""
        return EvalError(
            ErrorCodes.RECURSION_DEPTH,
            f"Expression nesting exceeded the interpreter stack after {visited} steps",
        )


#==============================================================================
# Validation Error Types
#==============================================================================

@dataclass(frozen=True)
class ValidationError:
    """A problem found at one position of an expression tree"""
    path: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Result of validating an expression tree"""
    expr: Any
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


#==============================================================================
# Exhaustiveness Checking
#==============================================================================

def exhaustive(value: Any) -> None:
    """
    Asserts that a value is unreachable, ensuring exhaustive handling.

    Raises:
        AssertionError: If called (indicating unhandled case)
    """
    raise AssertionError(f"Unexpected value: {value!r}")
