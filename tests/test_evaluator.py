"""Test the evaluator and the run driver."""
import pytest

from pystep.effects import EffectMode, buffer_sink, create_effect_context
from pystep.env import empty_value_env
from pystep.errors import ErrorCodes, EvalError
from pystep.evaluator import EvalOptions, Evaluator, create_evaluator, evaluate, run
from pystep.samples import SAMPLES
from pystep.types import (
    abstraction,
    add,
    app,
    count_nodes,
    int_val,
    is_closure,
    is_error,
    lit,
    var,
)


class TestScenarios:
    """Worked scenarios for each construct."""

    def test_literal(self, evaluator, empty_env, effects):
        value = evaluator.evaluate(lit(5), empty_env, effects)
        assert value == int_val(5)
        assert effects.state.trace == [5]
        assert effects.state.steps == 1

    def test_addition_type_mismatch(self, evaluator, empty_env, effects, add_type_error):
        with pytest.raises(EvalError) as exc_info:
            evaluator.evaluate(add_type_error, empty_env, effects)
        assert exc_info.value.code == ErrorCodes.TYPE_MISMATCH
        assert exc_info.value.detail == "addition"

    def test_worked_example(self, worked_example):
        outcome = run(worked_example, empty_value_env(), 0)
        assert outcome.as_tuple() == (int_val(18), 8, ["x"], [12, 4, 2])
        assert outcome.ok

    def test_unbound_variable_keeps_effects(self):
        outcome = run(var("x"))
        assert is_error(outcome.result)
        assert outcome.result.code == ErrorCodes.UNBOUND_VARIABLE.value
        assert outcome.result.detail == "x"
        assert outcome.result.message == "unbound variable: x"
        assert outcome.access_log == ["x"]
        assert outcome.steps == 1
        assert not outcome.ok

    def test_application_type_mismatch(self):
        outcome = run(app(lit(1), lit(2)))
        assert outcome.result.code == ErrorCodes.TYPE_MISMATCH.value
        assert outcome.result.detail == "application"
        # Both operands are evaluated before the callee shape is checked
        assert outcome.trace == [1, 2]
        assert outcome.steps == 3

    def test_abstraction_evaluates_to_closure(self, sample_env):
        outcome = run(abstraction("z", var("x")), sample_env)
        assert is_closure(outcome.result)
        assert outcome.result.env is sample_env
        assert outcome.result.param == "z"
        assert outcome.steps == 1
        assert outcome.access_log == []

    def test_variable_lookup(self, sample_env):
        outcome = run(add(var("x"), var("y")), sample_env)
        assert outcome.result == int_val(3)
        assert outcome.access_log == ["x", "y"]


class TestEvaluationOrder:
    """Left-then-right evaluation and short-circuiting."""

    def test_left_failure_wins(self):
        outcome = run(add(var("a"), var("b")))
        assert outcome.result.detail == "a"
        assert outcome.access_log == ["a"]
        assert outcome.steps == 2

    def test_right_not_evaluated_after_left_failure(self):
        outcome = run(add(var("a"), add(lit(1), lit(2))))
        assert outcome.trace == []
        assert outcome.steps == 2

    def test_right_failure_after_left_effects(self):
        outcome = run(add(lit(1), var("b")))
        assert outcome.result.detail == "b"
        assert outcome.trace == [1]
        assert outcome.access_log == ["b"]
        assert outcome.steps == 3

    def test_argument_not_evaluated_after_callee_failure(self):
        outcome = run(app(var("f"), lit(1)))
        assert outcome.result.detail == "f"
        assert outcome.trace == []

    def test_failure_inside_body_keeps_prior_effects(self):
        expr = add(lit(1), app(abstraction("x", var("y")), lit(2)))
        outcome = run(expr)
        assert outcome.result.code == ErrorCodes.UNBOUND_VARIABLE.value
        assert outcome.trace == [1, 2]
        assert outcome.access_log == ["y"]
        assert outcome.steps == 6


class TestStepCounter:
    """The counter counts each visited node once."""

    def test_counter_starts_at_initial_value(self, worked_example):
        outcome = run(worked_example, initial_steps=100)
        assert outcome.steps == 108

    @pytest.mark.parametrize("expr", [
        lit(1),
        add(lit(1), lit(2)),
        abstraction("x", add(var("x"), var("x"))),
        add(lit(1), add(lit(2), add(lit(3), lit(4)))),
    ])
    def test_counter_equals_nodes_without_applications(self, expr):
        # Abstraction bodies are not visited until applied
        visited = 1 if expr.kind == "abs" else count_nodes(expr)
        assert run(expr).steps == visited

    def test_applied_body_counted_per_call(self):
        double = abstraction("f", abstraction("x", app(var("f"), app(var("f"), var("x")))))
        inc = abstraction("n", add(var("n"), lit(1)))
        outcome = run(app(app(double, inc), lit(0)))
        assert outcome.result == int_val(2)
        assert outcome.access_log == ["f", "f", "x", "n", "n"]
        assert outcome.trace == [0, 1, 1]


class TestClosures:
    """Lexical scoping through captured environments."""

    def test_body_uses_captured_environment(self):
        # (\y. (\x. x + y)) 10 builds a closure capturing y=10
        make_adder = app(abstraction("y", abstraction("x", add(var("x"), var("y")))), lit(10))
        # The call site binds y=1 but the closure must still see y=10
        expr = app(abstraction("y", app(make_adder, lit(5))), lit(1))
        assert run(expr).result == int_val(15)

    def test_caller_environment_is_not_visible(self, sample_env):
        fn = run(abstraction("z", var("w"))).result
        call_env = sample_env.extend("f", fn).extend("w", int_val(9))
        outcome = run(app(var("f"), lit(0)), call_env)
        assert outcome.result.code == ErrorCodes.UNBOUND_VARIABLE.value
        assert outcome.result.detail == "w"

    def test_parameter_shadows_captured_binding(self, sample_env):
        outcome = run(app(abstraction("x", var("x")), lit(7)), sample_env)
        assert outcome.result == int_val(7)
        assert sample_env.lookup("x") == int_val(1)

    def test_const_sample(self):
        assert run(SAMPLES["const"]).result == int_val(1)

    def test_lexical_scope_sample(self):
        assert run(SAMPLES["lexical-scope"]).result == int_val(11)


class TestModes:
    """Effect composition across modes."""

    def test_pure_mode_raises(self):
        evaluator = create_evaluator(EffectMode.PURE)
        with pytest.raises(EvalError) as exc_info:
            evaluator.run(var("x"))
        assert exc_info.value.code == ErrorCodes.UNBOUND_VARIABLE

    def test_pure_mode_value(self, worked_example):
        outcome = create_evaluator(EffectMode.PURE).run(worked_example)
        assert outcome.as_tuple() == (int_val(18), 0, [], [])

    def test_failure_mode_captures_error(self, add_type_error):
        outcome = create_evaluator(EffectMode.FAILURE).run(add_type_error)
        assert outcome.result.code == ErrorCodes.TYPE_MISMATCH.value
        assert outcome.steps == 0

    def test_counting_mode(self, worked_example):
        outcome = create_evaluator(EffectMode.COUNTING).run(worked_example)
        assert outcome.as_tuple() == (int_val(18), 8, [], [])

    def test_logging_mode(self):
        outcome = create_evaluator(EffectMode.LOGGING).run(var("x"))
        assert outcome.steps == 1
        assert outcome.access_log == ["x"]
        assert outcome.trace == []

    def test_output_mode_writes_each_literal(self, worked_example, capsys):
        outcome = create_evaluator(EffectMode.OUTPUT).run(worked_example)
        assert capsys.readouterr().out == "12\n4\n2\n"
        assert outcome.trace == [12, 4, 2]

    def test_output_is_not_retracted_on_failure(self):
        written = []
        evaluator = create_evaluator(EffectMode.OUTPUT, output=buffer_sink(written))
        outcome = evaluator.run(add(lit(3), add(lit(4), var("z"))))
        assert not outcome.ok
        assert written == [3, 4]


class TestStepLimit:
    """Caller-enforced step limits."""

    def test_no_limit_by_default(self):
        assert Evaluator().options.max_steps is None

    def test_divergent_expression_stops(self):
        outcome = create_evaluator(max_steps=100).run(SAMPLES["omega"])
        assert outcome.result.code == ErrorCodes.NON_TERMINATION.value
        assert outcome.steps == 101

    def test_limit_not_hit(self, worked_example):
        outcome = create_evaluator(max_steps=8).run(worked_example)
        assert outcome.result == int_val(18)


class TestDeterminism:
    """Repeated runs are independent."""

    @pytest.mark.parametrize("name", ["example", "unbound", "add-type-error", "const"])
    def test_rerun_is_identical(self, name):
        first = run(SAMPLES[name])
        second = run(SAMPLES[name])
        assert first.as_tuple() == second.as_tuple()

    def test_runs_do_not_share_state(self, worked_example):
        evaluator = Evaluator()
        evaluator.run(worked_example)
        outcome = evaluator.run(worked_example)
        assert outcome.steps == 8
        assert outcome.trace == [12, 4, 2]

    def test_closed_expressions_never_unbound(self):
        for name, expr in SAMPLES.items():
            if name == "omega" or name == "unbound":
                continue
            outcome = run(expr)
            if not outcome.ok:
                assert outcome.result.code != ErrorCodes.UNBOUND_VARIABLE.value


class TestConvenience:
    """Module-level helpers."""

    def test_evaluate_threads_given_context(self):
        ctx = create_effect_context(EffectMode.TRACING, initial_steps=10)
        value = evaluate(add(lit(1), lit(2)), empty_value_env(), ctx)
        assert value == int_val(3)
        assert ctx.state.steps == 13
        evaluate(lit(4), empty_value_env(), ctx)
        assert ctx.state.trace == [1, 2, 4]

    def test_run_accepts_options(self):
        outcome = run(var("x"), options=EvalOptions(mode=EffectMode.COUNTING))
        assert outcome.access_log == []
        assert outcome.steps == 1


def _add_chain(depth):
    expr = lit(0)
    for _ in range(depth):
        expr = add(lit(1), expr)
    return expr


class TestDeepExpressions:
    """Nesting deeper than the interpreter stack."""

    def test_shallow_chain_evaluates(self):
        outcome = run(_add_chain(100))
        assert outcome.result == int_val(100)
        assert outcome.steps == 201

    def test_deep_chain_keeps_effects(self):
        outcome = run(_add_chain(5000))
        assert not outcome.ok
        assert outcome.result.code == ErrorCodes.RECURSION_DEPTH.value
        assert outcome.steps > 0
        assert outcome.trace
        assert set(outcome.trace) == {1}
        assert outcome.steps >= len(outcome.trace)

    def test_deep_chain_counts_from_initial_steps(self):
        outcome = run(_add_chain(5000), initial_steps=1000)
        assert outcome.steps > 1000
        assert outcome.result.code == ErrorCodes.RECURSION_DEPTH.value

    def test_deep_chain_raises_in_pure_mode(self):
        evaluator = create_evaluator(mode=EffectMode.PURE)
        with pytest.raises(EvalError) as exc_info:
            evaluator.run(_add_chain(5000))
        assert exc_info.value.code == ErrorCodes.RECURSION_DEPTH


class TestOptions:
    """Validation of evaluation options."""

    def test_negative_max_steps_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            EvalOptions(max_steps=-1)

    def test_create_evaluator_rejects_negative_max_steps(self):
        with pytest.raises(ValueError):
            create_evaluator(max_steps=-5)

    def test_zero_max_steps_stops_immediately(self):
        outcome = run(lit(1), options=EvalOptions(max_steps=0))
        assert outcome.result.code == ErrorCodes.NON_TERMINATION.value
        assert outcome.steps == 1
