"""Test fixtures for the pystep test suite."""
import sys
from pathlib import Path

import pytest

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from pystep.env import ValueEnv, empty_value_env
from pystep.effects import EffectMode, create_effect_context
from pystep.evaluator import Evaluator, EvalOptions
from pystep.samples import example_expr
from pystep.types import abstraction, add, int_val, lit, var


@pytest.fixture
def evaluator() -> Evaluator:
    """Evaluator with every recording capability enabled."""
    return Evaluator(EvalOptions(mode=EffectMode.TRACING))


@pytest.fixture
def effects():
    """Fresh effect context starting at step 0."""
    return create_effect_context(EffectMode.TRACING)


@pytest.fixture
def empty_env() -> ValueEnv:
    return empty_value_env()


@pytest.fixture
def sample_env() -> ValueEnv:
    """Environment binding x=1 and y=2."""
    env = empty_value_env()
    env = env.extend("x", int_val(1))
    env = env.extend("y", int_val(2))
    return env


@pytest.fixture
def worked_example():
    """12 + ((\\x. x) (4 + 2))"""
    return example_expr


@pytest.fixture
def identity():
    return abstraction("x", var("x"))


@pytest.fixture
def add_type_error():
    return add(lit(1), abstraction("x", var("x")))
