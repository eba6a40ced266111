"""
Input and output linguistic variables.

An input variable holds a crisp value and the terms it is fuzzified through.
An output variable owns the accumulator that rules append their conclusions to
and the defuzzifier that turns the accumulator into a crisp value.
"""

import logging
import math
from typing import Dict, Iterable, List, Optional

from fuzzyrules import op
from fuzzyrules.norms import SNorm
from fuzzyrules.terms import Aggregated, Term

variables_log = logging.getLogger("fuzzifier")

INPUT = "input"
OUTPUT = "output"


class Variable:
    """
    A named range with an ordered set of terms.

    Attributes:
        name (str): The name used in rule text.
        minimum, maximum (float): The range of the variable.
        terms (List[Term]): The terms, in declaration order.
        enabled (bool): Propositions over a disabled variable evaluate to 0.0
            and disabled output variables receive no conclusions.
        value (float): The current crisp value.
    """

    kind = ""

    def __init__(
        self,
        name: str = "",
        minimum: float = -math.inf,
        maximum: float = math.inf,
        terms: Optional[Iterable[Term]] = None,
        enabled: bool = True,
    ):
        self.name = name
        self.minimum = minimum
        self.maximum = maximum
        self.terms: List[Term] = list(terms or [])
        self.enabled = enabled
        self.value = math.nan

    def is_enabled(self) -> bool:
        return self.enabled

    def add_term(self, term: Term) -> Term:
        self.terms.append(term)
        return term

    def has_term(self, name: str) -> bool:
        return any(t.name == name for t in self.terms)

    def get_term(self, name: str) -> Term:
        for term in self.terms:
            if term.name == name:
                return term
        raise KeyError(f"term <{name}> not found in variable <{self.name}>")

    def fuzzify(self, x: float) -> Dict[str, float]:
        """
        Fuzzifies a crisp value through every term of this variable.

        Args:
            x (float): The crisp value.

        Returns:
            Dict[str, float]: Term name to membership degree, only for terms
                with a degree > 0.
        """
        fuzzified_output = {}
        for term in self.terms:
            degree = term.membership(x)
            if degree > 0:
                fuzzified_output[term.name] = degree

        formatted_output = {k: op.fmt(v) for k, v in fuzzified_output.items()}
        variables_log.debug("Fuzzified %s= %s -> %s", self.name, op.fmt(x), formatted_output)
        return fuzzified_output

    def highest_membership(self, x: float) -> Optional[Term]:
        """The term with the largest positive membership at x, if any."""
        best, best_degree = None, 0.0
        for term in self.terms:
            degree = term.membership(x)
            if op.is_gt(degree, best_degree):
                best, best_degree = term, degree
        return best

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class InputVariable(Variable):
    kind = INPUT

    def set_value(self, x: float, bound: bool = False) -> None:
        self.value = op.bound(x, self.minimum, self.maximum) if bound else x

    def fuzzy_input_value(self) -> Dict[str, float]:
        return self.fuzzify(self.value)


class OutputVariable(Variable):
    """
    Output variable with its accumulator.

    Attributes:
        fuzzy_output (Aggregated): Conclusions appended by the fired rules.
        defuzzifier: Object with defuzzify(aggregated, minimum, maximum).
        default_value (float): Value used when no rule fired.
        lock_previous_value (bool): Keep the last valid value when no rule fired.
        previous_value (float): Value before the last defuzzify().
    """

    kind = OUTPUT

    def __init__(
        self,
        name: str = "",
        minimum: float = -math.inf,
        maximum: float = math.inf,
        terms: Optional[Iterable[Term]] = None,
        enabled: bool = True,
        aggregation: Optional[SNorm] = None,
        defuzzifier=None,
        default_value: float = math.nan,
        lock_previous_value: bool = False,
    ):
        super().__init__(name, minimum, maximum, terms, enabled)
        self.fuzzy_output = Aggregated(name, minimum, maximum, aggregation)
        self.defuzzifier = defuzzifier
        self.default_value = default_value
        self.lock_previous_value = lock_previous_value
        self.previous_value = math.nan

    def clear_fuzzy_output(self) -> None:
        """Empties the accumulator; called once at the start of every cycle."""
        self.fuzzy_output.clear()

    def clear(self) -> None:
        """Full reset: accumulator, current and previous values."""
        self.fuzzy_output.clear()
        self.value = math.nan
        self.previous_value = math.nan

    def defuzzify(self) -> float:
        """
        Computes the crisp value from the accumulator.

        Falls back to the previous value (if locked and finite) or to the
        default value when no rule fired or the defuzzifier returned NaN.
        """
        if not self.enabled:
            return self.value
        if not math.isnan(self.value):
            self.previous_value = self.value

        result = math.nan
        if not self.fuzzy_output.is_empty():
            if self.defuzzifier is None:
                raise ValueError(f"defuzzifier needed to defuzzify variable <{self.name}>")
            result = self.defuzzifier.defuzzify(self.fuzzy_output, self.minimum, self.maximum)
        else:
            variables_log.debug("No conclusions for <%s>, using fallback value.", self.name)

        if math.isnan(result):
            if self.lock_previous_value and not math.isnan(self.previous_value):
                result = self.previous_value
            else:
                result = self.default_value

        self.value = result
        return result

    def fuzzy_output_value(self) -> str:
        """Text of the degree per term, e.g. '0.24/low + 0.0/high'."""
        return " + ".join(
            f"{op.fmt(self.fuzzy_output.activation_degree(t))}/{t.name}" for t in self.terms
        )
