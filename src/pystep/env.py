"""
pystep Environment
Value environment for evaluation

This module provides an immutable value environment. Each extension adds a
single-binding layer on top of its parent, so extending is O(1) and every
previously returned environment remains valid and unchanged.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple

from pystep.types import Value


#==============================================================================
# Value Environment (ρ)
# Maps variable names to their runtime values
#==============================================================================

class ValueEnv:
    """
    Immutable value environment.

    Bindings are stored as a chain of layers. Lookups walk from the newest
    layer to the oldest, so a later binding shadows an earlier one with the
    same name. No operation modifies an existing environment.
    """

    __slots__ = ("_layer", "_parent")

    def __init__(
        self,
        bindings: Optional[Dict[str, Value]] = None,
        parent: Optional["ValueEnv"] = None,
    ):
        """
        Create a new value environment.

        Args:
            bindings: Bindings for this layer (optional)
            parent: Environment these bindings shadow (optional)
        """
        self._layer: Dict[str, Value] = dict(bindings) if bindings else {}
        self._parent = parent

    @property
    def bindings(self) -> Dict[str, Value]:
        """Return a flattened copy of the visible bindings."""
        return dict(self.items())

    def extend(self, name: str, value: Value) -> "ValueEnv":
        """
        Extend the environment with a new binding.
        Returns a new ValueEnv without modifying the original.

        Args:
            name: Variable name
            value: Value to bind

        Returns:
            New ValueEnv with the additional binding
        """
        return ValueEnv({name: value}, parent=self)

    def extend_many(self, bindings: List[Tuple[str, Value]]) -> "ValueEnv":
        """
        Extend the environment with multiple bindings.
        Later pairs shadow earlier pairs with the same name.

        Args:
            bindings: List of (name, value) tuples

        Returns:
            New ValueEnv with the additional bindings
        """
        if not bindings:
            return self
        return ValueEnv(dict(bindings), parent=self)

    def lookup(self, name: str) -> Optional[Value]:
        """
        Look up a value binding in the environment.

        Args:
            name: Variable name to look up

        Returns:
            Value if found, None otherwise
        """
        env: Optional[ValueEnv] = self
        while env is not None:
            if name in env._layer:
                return env._layer[name]
            env = env._parent
        return None

    def items(self) -> Iterator[Tuple[str, Value]]:
        """Iterate over visible (name, value) pairs, oldest binding first."""
        seen: Dict[str, Value] = {}
        for layer in self._layers():
            seen.update(layer)
        return iter(seen.items())

    def _layers(self) -> List[Dict[str, Value]]:
        layers: List[Dict[str, Value]] = []
        env: Optional[ValueEnv] = self
        while env is not None:
            layers.append(env._layer)
            env = env._parent
        layers.reverse()
        return layers

    def __contains__(self, name: str) -> bool:
        """Check if a name is bound in the environment."""
        return self.lookup(name) is not None

    def __len__(self) -> int:
        """Return the number of visible bindings (walks every layer)."""
        return len(self.bindings)

    def __repr__(self) -> str:
        return f"ValueEnv({self.bindings})"


def empty_value_env() -> ValueEnv:
    """
    Create an empty value environment.

    Returns:
        New ValueEnv with no bindings
    """
    return ValueEnv()


#==============================================================================
# Environment Helper Functions
#==============================================================================

def lookup(env: ValueEnv, name: str) -> Optional[Value]:
    """Look up a value in the environment"""
    return env.lookup(name)


def bind(env: ValueEnv, name: str, value: Value) -> ValueEnv:
    """Extend the environment with a new binding"""
    return env.extend(name, value)
