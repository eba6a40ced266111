"""
Name-to-constructor registries for hedges, norms, terms, activation strategies
and defuzzifiers.

The registries are process wide and read-mostly: each defining module fills
its registry at import time, and the parsers and the configuration loader
only query them afterwards. Call freeze() once start-up is complete if the
registries are shared between threads.
"""

import logging
from typing import Any, Callable, Dict, List

from fuzzyrules.errors import ConfigurationError

factory_log = logging.getLogger("factory")


class Registry:
    """
    Maps names to constructors.

    Attributes:
        kind (str): What the registry builds (used in error messages).
        frozen (bool): Whether further registration is rejected.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self.frozen = False
        self._constructors: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str, constructor: Callable[..., Any]) -> Callable[..., Any]:
        if self.frozen:
            raise ConfigurationError(
                f"{self.kind} registry is frozen, cannot register <{name}>"
            )
        self._constructors[name] = constructor
        factory_log.debug("Registered %s <%s>", self.kind, name)
        return constructor

    def has(self, name: str) -> bool:
        return name in self._constructors

    def construct(self, name: str, *args, **kwargs) -> Any:
        try:
            constructor = self._constructors[name]
        except KeyError:
            raise ConfigurationError(
                f"{self.kind} <{name}> is not registered; "
                f"expected one of {self.names()}"
            ) from None
        return constructor(*args, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._constructors)

    def freeze(self) -> None:
        self.frozen = True

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._constructors)


HEDGES = Registry("hedge")
TNORMS = Registry("t-norm")
SNORMS = Registry("s-norm")
TERMS = Registry("term")
ACTIVATIONS = Registry("activation")
DEFUZZIFIERS = Registry("defuzzifier")

ALL_REGISTRIES = (HEDGES, TNORMS, SNORMS, TERMS, ACTIVATIONS, DEFUZZIFIERS)


def freeze_all() -> None:
    """Freezes every registry; subsequent register() calls raise."""
    for registry in ALL_REGISTRIES:
        registry.freeze()
