"""
pystep Evaluator
Implements big-step evaluation under effects: rho |- e ⇓ v

This module provides expression evaluation for the integer/lambda language
using big-step operational semantics with lexically scoped closures. Effects
(step counting, access logging, literal tracing, output) are performed
through an EffectContext threaded through every recursive call; failures
raise EvalError and unwind to the caller of `run`, which keeps every effect
recorded before the failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from pystep.types import (
    Expr, Value, ErrorVal,
    LitExpr, VarExpr, AddExpr, AbsExpr, AppExpr,
    int_val, closure_val, is_int, is_closure,
)
from pystep.errors import EvalError, exhaustive
from pystep.env import ValueEnv, empty_value_env
from pystep.effects import (
    Capability,
    EffectContext,
    EffectMode,
    OutputSink,
    create_effect_context,
)

logger = logging.getLogger(__name__)


#==============================================================================
# Evaluation Options
#==============================================================================

@dataclass
class EvalOptions:
    """Options for a top-level evaluation run"""
    mode: EffectMode = EffectMode.TRACING
    max_steps: Optional[int] = None
    output: Optional[OutputSink] = None

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")


#==============================================================================
# Run Result
#==============================================================================

@dataclass
class RunResult:
    """Outcome of `run`: the result value or error plus the recorded effects"""
    result: Union[Value, ErrorVal]
    steps: int
    access_log: List[str] = field(default_factory=list)
    trace: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result.kind != "error"

    def as_tuple(self) -> Tuple[Union[Value, ErrorVal], int, List[str], List[int]]:
        return self.result, self.steps, self.access_log, self.trace


#==============================================================================
# Evaluator Class
#==============================================================================

class Evaluator:
    """
    Big-step expression evaluator.

    The evaluator implements the following inference rules, each of which
    counts one step before doing anything else:
    - E-Lit: rho |- lit(n) ⇓ n                       (emits n)
    - E-Var: rho(x) = v ⇒ rho |- var(x) ⇓ v          (logs x)
    - E-Add: rho |- l ⇓ n1, rho |- r ⇓ n2 ⇒ rho |- add(l, r) ⇓ n1 + n2
    - E-Abs: rho |- abs(x, body) ⇓ ⟨x, body, rho⟩
    - E-App: rho |- f ⇓ ⟨x, body, rho'⟩, rho |- a ⇓ v, rho'[x:v] |- body ⇓ v'
             ⇒ rho |- app(f, a) ⇓ v'
    """

    def __init__(self, options: Optional[EvalOptions] = None):
        """
        Initialize the evaluator.

        Args:
            options: Evaluation options (mode, max_steps, output)
        """
        self._options = options or EvalOptions()

    @property
    def options(self) -> EvalOptions:
        """Get the evaluation options"""
        return self._options

    #---------------------------------------------------------------------------
    # Public Evaluation API
    #---------------------------------------------------------------------------

    def evaluate(
        self,
        expr: Expr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        Evaluate an expression: rho |- e ⇓ v

        Args:
            expr: Expression to evaluate
            env: Value environment for variable lookups
            effects: Effect context owned by the current run

        Returns:
            Result value

        Raises:
            EvalError: If evaluation fails or exceeds max_steps
        """
        return self._eval_expr(expr, env, effects)

    def run(
        self,
        expr: Expr,
        env: Optional[ValueEnv] = None,
        initial_steps: int = 0,
    ) -> RunResult:
        """
        Evaluate an expression with a fresh effect state.

        Args:
            expr: Expression to evaluate
            env: Initial environment (empty if omitted)
            initial_steps: Starting value of the step counter

        Returns:
            RunResult with the value (or error value) and recorded effects

        Raises:
            EvalError: Only when the mode does not capture failures
        """
        effects = create_effect_context(
            self._options.mode, initial_steps, self._options.output
        )
        start_env = env if env is not None else empty_value_env()

        try:
            try:
                value = self._eval_expr(expr, start_env, effects)
            except RecursionError:
                # Effects recorded before the overflow stay in the context
                raise EvalError.recursion_depth(effects.visited) from None
        except EvalError as e:
            logger.debug(
                "evaluation failed after %d nodes: %s", effects.visited, e
            )
            if not effects.enabled(Capability.FAILURE):
                raise
            return self._result(e.to_value(), effects)

        logger.debug(
            "evaluation finished after %d nodes (counter=%d, log=%d, trace=%d)",
            effects.visited,
            effects.state.steps,
            len(effects.state.access_log),
            len(effects.state.trace),
        )
        return self._result(value, effects)

    @staticmethod
    def _result(
        value: Union[Value, ErrorVal],
        effects: EffectContext
    ) -> RunResult:
        state = effects.state
        return RunResult(
            result=value,
            steps=state.steps,
            access_log=list(state.access_log),
            trace=list(state.trace),
        )

    #---------------------------------------------------------------------------
    # Expression Evaluation (Dispatch)
    #---------------------------------------------------------------------------

    def _eval_expr(
        self,
        expr: Expr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        Main expression dispatch based on expression kind.
        """
        self._check_steps(effects)

        kind = expr.kind

        if kind == "lit":
            return self._eval_lit(expr, env, effects)
        elif kind == "var":
            return self._eval_var(expr, env, effects)
        elif kind == "add":
            return self._eval_add(expr, env, effects)
        elif kind == "abs":
            return self._eval_abs(expr, env, effects)
        elif kind == "app":
            return self._eval_app(expr, env, effects)
        else:
            exhaustive(expr)

    #---------------------------------------------------------------------------
    # Expression Rules
    #---------------------------------------------------------------------------

    def _eval_lit(
        self,
        expr: LitExpr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """E-Lit: rho |- lit(n) ⇓ n"""
        effects.emit(expr.value)
        return int_val(expr.value)

    def _eval_var(
        self,
        expr: VarExpr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        E-Var: rho(x) = v
                -------
                rho |- var(x) ⇓ v

        The name is logged before the lookup, so failed lookups are logged too.
        """
        name = expr.name
        effects.tell(name)

        value = env.lookup(name)
        if value is None:
            raise EvalError.unbound_variable(name)

        return value

    def _eval_add(
        self,
        expr: AddExpr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        E-Add: rho |- l ⇓ n1    rho |- r ⇓ n2
               -----------------------------
               rho |- add(l, r) ⇓ n1 + n2
        """
        left = self._eval_expr(expr.left, env, effects)
        right = self._eval_expr(expr.right, env, effects)

        if not (is_int(left) and is_int(right)):
            raise EvalError.type_mismatch("addition")

        return int_val(left.value + right.value)

    def _eval_abs(
        self,
        expr: AbsExpr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        E-Abs: rho |- abs(x, body) ⇓ ⟨x, body, rho⟩

        Creates a closure value capturing the current environment.
        """
        return closure_val(env, expr.param, expr.body)

    def _eval_app(
        self,
        expr: AppExpr,
        env: ValueEnv,
        effects: EffectContext
    ) -> Value:
        """
        E-App: rho |- f ⇓ ⟨x, body, rho'⟩    rho |- a ⇓ v
               rho'[x:v] |- body ⇓ v'
               --------------------------------------
                       rho |- app(f, a) ⇓ v'

        The body sees only the closure's own environment plus its parameter,
        never the caller's environment.
        """
        fn_value = self._eval_expr(expr.fn, env, effects)
        arg_value = self._eval_expr(expr.arg, env, effects)

        if not is_closure(fn_value):
            raise EvalError.type_mismatch("application")

        call_env = fn_value.env.extend(fn_value.param, arg_value)
        return self._eval_expr(fn_value.body, call_env, effects)

    #---------------------------------------------------------------------------
    # Utility Functions
    #---------------------------------------------------------------------------

    def _check_steps(self, effects: EffectContext) -> None:
        """
        Count a step and enforce the optional step limit.

        Raises:
            EvalError: If max_steps is set and exceeded
        """
        effects.tick()
        max_steps = self._options.max_steps
        if max_steps is not None and effects.visited > max_steps:
            raise EvalError.non_termination(max_steps)


#==============================================================================
# Convenience Functions
#==============================================================================

def create_evaluator(
    mode: EffectMode = EffectMode.TRACING,
    max_steps: Optional[int] = None,
    output: Optional[OutputSink] = None,
) -> Evaluator:
    """
    Create an evaluator instance.

    Args:
        mode: Preset capability set
        max_steps: Optional step limit
        output: Output sink for the OUTPUT mode

    Returns:
        New Evaluator instance
    """
    return Evaluator(EvalOptions(mode=mode, max_steps=max_steps, output=output))


def evaluate(
    expr: Expr,
    env: ValueEnv,
    effects: EffectContext,
    options: Optional[EvalOptions] = None,
) -> Value:
    """
    Convenience function for evaluation against an existing effect context.

    Raises:
        EvalError: If evaluation fails
    """
    return Evaluator(options).evaluate(expr, env, effects)


def run(
    expr: Expr,
    env: Optional[ValueEnv] = None,
    initial_steps: int = 0,
    options: Optional[EvalOptions] = None,
) -> RunResult:
    """
    Evaluate an expression with a fresh effect state and return the result
    together with the final counter, access log and trace.

    Args:
        expr: Expression to evaluate
        env: Initial environment (empty if omitted)
        initial_steps: Starting value of the step counter
        options: Evaluation options (optional)

    Returns:
        RunResult
    """
    return Evaluator(options).run(expr, env, initial_steps)
