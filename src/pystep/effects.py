"""
pystep Effect System
Composable effect capabilities for expression evaluation

This module provides the effect context threaded through the evaluator.
Each effect concern (failure capture, step counting, access logging, literal
tracing, external output) is a capability that can be switched on or off
independently. Disabled capabilities are no-ops, so the evaluator performs
the same calls in every configuration.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Callable,
    Dict,
    FrozenSet,
    List,
    Optional,
    TypeAlias,
)


#==============================================================================
# Capabilities
#==============================================================================

class Capability(str, Enum):
    """Individual effect concerns"""
    FAILURE = "failure"
    COUNTER = "counter"
    ACCESS_LOG = "accessLog"
    TRACE = "trace"
    OUTPUT = "output"


class EffectMode(str, Enum):
    """Preset capability sets, from the bare evaluator to the full stack"""
    PURE = "pure"
    FAILURE = "failure"
    COUNTING = "counting"
    LOGGING = "logging"
    TRACING = "tracing"
    OUTPUT = "output"


_MODE_CAPABILITIES: Dict[EffectMode, FrozenSet[Capability]] = {
    EffectMode.PURE: frozenset(),
    EffectMode.FAILURE: frozenset({Capability.FAILURE}),
    EffectMode.COUNTING: frozenset({Capability.FAILURE, Capability.COUNTER}),
    EffectMode.LOGGING: frozenset({
        Capability.FAILURE, Capability.COUNTER, Capability.ACCESS_LOG,
    }),
    EffectMode.TRACING: frozenset({
        Capability.FAILURE, Capability.COUNTER, Capability.ACCESS_LOG,
        Capability.TRACE,
    }),
    EffectMode.OUTPUT: frozenset({
        Capability.FAILURE, Capability.COUNTER, Capability.ACCESS_LOG,
        Capability.TRACE, Capability.OUTPUT,
    }),
}


def mode_capabilities(mode: EffectMode) -> FrozenSet[Capability]:
    """
    Look up the capabilities enabled by a preset mode.

    Args:
        mode: The effect mode

    Returns:
        The set of enabled capabilities
    """
    return _MODE_CAPABILITIES[mode]


#==============================================================================
# Output Sinks
#==============================================================================

OutputSink: TypeAlias = Callable[[int], None]


def print_sink(value: int) -> None:
    """Write each traced literal to stdout on its own line"""
    print(value)


def buffer_sink(buffer: List[int]) -> OutputSink:
    """
    Create a sink that appends traced literals to a caller-owned list.

    Args:
        buffer: List to append to

    Returns:
        OutputSink writing into the buffer
    """
    def _write(value: int) -> None:
        buffer.append(value)
    return _write


#==============================================================================
# Effect State
#==============================================================================

@dataclass
class EffectState:
    """Mutable effect accumulators owned by a single evaluation run"""
    steps: int = 0
    access_log: List[str] = field(default_factory=list)
    trace: List[int] = field(default_factory=list)


#==============================================================================
# Effect Context
#==============================================================================

class EffectContext:
    """
    The capability set an evaluation runs against.

    The counter is incremented before the log or trace append for the same
    node, and nothing recorded here is ever removed, so after a failure the
    state reflects every node visited up to the failure point.
    """

    def __init__(
        self,
        capabilities: FrozenSet[Capability],
        state: Optional[EffectState] = None,
        output: Optional[OutputSink] = None,
    ):
        self._capabilities = frozenset(capabilities)
        self._state = state if state is not None else EffectState()
        # Nodes visited in this run, counted even when COUNTER is disabled
        self.visited = 0
        if output is None and Capability.OUTPUT in self._capabilities:
            output = print_sink
        self._output = output

    @property
    def state(self) -> EffectState:
        return self._state

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return self._capabilities

    def enabled(self, capability: Capability) -> bool:
        """Check if a capability is active"""
        return capability in self._capabilities

    #---------------------------------------------------------------------------
    # Effect Operations
    #---------------------------------------------------------------------------

    def tick(self) -> int:
        """Count one evaluation step; returns the current counter"""
        self.visited += 1
        if Capability.COUNTER in self._capabilities:
            self._state.steps += 1
        return self._state.steps

    def tell(self, name: str) -> None:
        """Append a variable name to the access log"""
        if Capability.ACCESS_LOG in self._capabilities:
            self._state.access_log.append(name)

    def emit(self, value: int) -> None:
        """Record a literal in the trace and write it to the output sink"""
        if Capability.TRACE in self._capabilities:
            self._state.trace.append(value)
        if Capability.OUTPUT in self._capabilities and self._output is not None:
            self._output(value)

    def __repr__(self) -> str:
        caps = ", ".join(sorted(c.value for c in self._capabilities))
        return f"EffectContext([{caps}], {self._state})"


#==============================================================================
# Convenience Functions
#==============================================================================

def create_effect_context(
    mode: EffectMode = EffectMode.TRACING,
    initial_steps: int = 0,
    output: Optional[OutputSink] = None,
) -> EffectContext:
    """
    Create a fresh effect context for one evaluation run.

    Args:
        mode: Preset capability set
        initial_steps: Starting value of the step counter
        output: Output sink (used only when the mode enables OUTPUT)

    Returns:
        New EffectContext with its own EffectState
    """
    return EffectContext(
        mode_capabilities(mode),
        EffectState(steps=initial_steps),
        output,
    )
