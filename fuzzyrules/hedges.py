"""
Linguistic hedges: unary modifiers of a membership degree.

A hedge sits between the keyword "is" and a term ("x is very high") and
reshapes the degree the term produces. Chains are folded innermost first: the
hedge written next to the term is applied first and the one written next to
"is" last, so "x is not very high" evaluates as not(very(high(x))).
"""

import math
from typing import Iterable, Sequence

from fuzzyrules.factory import HEDGES


class Hedge:
    """Base hedge. The name used in rule text is the lowercase class name."""

    @property
    def name(self) -> str:
        return type(self).__name__.lower()

    def hedge(self, x: float) -> float:
        raise NotImplementedError

    def apply(self, x: float) -> float:
        return self.hedge(x)

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return self.name


class Any(Hedge):
    """
    Always 1.0, whatever the input (NaN included).

    In an antecedent "x is any" ends the proposition without a term; the
    evaluator special-cases it when it is the hedge closest to the term.
    """

    def hedge(self, x: float) -> float:
        return 1.0


class Not(Hedge):
    def hedge(self, x: float) -> float:
        return 1.0 - x


class Seldom(Hedge):
    def hedge(self, x: float) -> float:
        if x <= 0.5:
            return math.sqrt(0.5 * x)
        return 1.0 - math.sqrt(0.5 * (1.0 - x))


class Somewhat(Hedge):
    def hedge(self, x: float) -> float:
        return math.sqrt(x)


class Very(Hedge):
    def hedge(self, x: float) -> float:
        return x * x


class Extremely(Hedge):
    def hedge(self, x: float) -> float:
        if x <= 0.5:
            return 2.0 * x * x
        return 1.0 - 2.0 * (1.0 - x) * (1.0 - x)


def fold_hedges(hedges: Sequence[Hedge], x: float) -> float:
    """
    Applies a hedge chain to a degree.

    Args:
        hedges (Sequence[Hedge]): Hedges in the order they were written
            (first element next to "is", last element next to the term).
        x (float): The base degree.

    Returns:
        float: h1(h2(...hn(x)...)).
    """
    for hedge in reversed(hedges):
        x = hedge.hedge(x)
    return x


def hedge_names(hedges: Iterable[Hedge]) -> str:
    return " ".join(h.name for h in hedges)


for _cls in (Any, Not, Seldom, Somewhat, Very, Extremely):
    HEDGES.register(_cls.__name__.lower(), _cls)
