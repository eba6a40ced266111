"""
Expression tree of a rule antecedent.

Leaves are propositions ("x is very A"), internal nodes are the binary
connectives "and"/"or". The tree is owned by the Antecedent that parsed it;
propositions only reference variables and terms owned by the engine.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from fuzzyrules.hedges import Any, Hedge

IS = "is"


class Expression:
    """Base node."""

    def copy(self) -> "Expression":
        raise NotImplementedError


@dataclass(eq=True)
class Proposition(Expression):
    """
    variable is [hedge]* term

    Attributes:
        variable: The referenced input or output variable.
        hedges (List[Hedge]): Hedges in the order they were written.
        term: The referenced term, None only for "variable is any".
    """

    variable: object = None
    hedges: List[Hedge] = field(default_factory=list)
    term: Optional[object] = None

    def ends_with_any(self) -> bool:
        return bool(self.hedges) and isinstance(self.hedges[-1], Any)

    def copy(self) -> "Proposition":
        return Proposition(self.variable, list(self.hedges), self.term)

    def __str__(self):
        tokens = []
        if self.variable is not None:
            tokens.append(self.variable.name)
            tokens.append(IS)
        tokens.extend(h.name for h in self.hedges)
        if self.term is not None:
            tokens.append(self.term.name)
        return " ".join(tokens)


@dataclass(eq=True)
class Operator(Expression):
    """A connective with exactly two children."""

    name: str = ""
    left: Optional[Expression] = None
    right: Optional[Expression] = None

    def copy(self) -> "Operator":
        return Operator(
            self.name,
            self.left.copy() if self.left is not None else None,
            self.right.copy() if self.right is not None else None,
        )

    def __str__(self):
        return self.name
