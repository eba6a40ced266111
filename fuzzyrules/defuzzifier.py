"""
Computes crisp output values from the aggregated fuzzy rule outputs.

This module implements the weighted defuzzifiers used by Takagi-Sugeno and
Tsukamoto systems. Each Activated entry in an output accumulator contributes
its firing strength W and a crisp value Z:

    Takagi-Sugeno:  Z = term.membership(W)      (Constant and Linear terms)
    Tsukamoto:      Z = term.tsukamoto(W, ...)  (monotonic terms, e.g. Ramp)

WeightedAverage returns Σ(W*Z) / ΣW and WeightedSum returns Σ(W*Z).
WeightedSumCustom computes Σ(W*Z) with the implication and aggregation
operators of the accumulator in place of the product and the sum.
"""

import logging
import math

from fuzzyrules.errors import ConfigurationError
from fuzzyrules.factory import DEFUZZIFIERS
from fuzzyrules.terms import Aggregated, Constant, Linear, Term

defuzzifier_log = logging.getLogger("defuzzifier")

AUTOMATIC = "Automatic"
TAKAGI_SUGENO = "TakagiSugeno"
TSUKAMOTO = "Tsukamoto"
TYPES = (AUTOMATIC, TAKAGI_SUGENO, TSUKAMOTO)


def infer_type(term: Term) -> str:
    """
    Infers the system type from a single term.

    Only the first entry of an accumulator is inspected; mixed accumulators are
    treated according to their first term.
    """
    if isinstance(term, (Constant, Linear)):
        return TAKAGI_SUGENO
    if term.is_monotonic:
        return TSUKAMOTO
    raise ConfigurationError(
        f"cannot infer type of term <{term.name}> ({type(term).__name__}); "
        f"expected Constant, Linear or a monotonic term"
    )


class WeightedDefuzzifier:
    """
    Base class of the weighted defuzzifiers.

    Attributes:
        kind (str): One of Automatic, TakagiSugeno, Tsukamoto.
    """

    def __init__(self, kind: str = AUTOMATIC):
        if kind not in TYPES:
            raise ConfigurationError(f"defuzzifier type <{kind}> not in {TYPES}")
        self.kind = kind
        defuzzifier_log.info("%s defuzzifier initialized (%s).", self.name, self.kind)

    @property
    def name(self) -> str:
        return type(self).__name__

    def _pairs(self, fuzzy_output: Aggregated, minimum: float, maximum: float):
        kind = self.kind
        if kind == AUTOMATIC:
            kind = infer_type(fuzzy_output.terms[0].term)
        for activated in fuzzy_output.terms:
            w = activated.degree
            if kind == TAKAGI_SUGENO:
                z = activated.term.membership(w)
            else:
                z = activated.term.tsukamoto(w, minimum, maximum)
            yield w, z

    def defuzzify(self, fuzzy_output: Aggregated, minimum: float, maximum: float) -> float:
        raise NotImplementedError

    def __repr__(self):
        return f"{self.name}({self.kind})"


class WeightedAverage(WeightedDefuzzifier):
    """Σ(Wi * Zi) / Σ Wi over the activated terms."""

    def defuzzify(self, fuzzy_output: Aggregated, minimum: float = math.nan,
                  maximum: float = math.nan) -> float:
        """
        Calculates the weighted average of the accumulator.

        Args:
            fuzzy_output (Aggregated): Accumulator of the output variable.
            minimum, maximum (float): Range of the output variable (Tsukamoto).

        Returns:
            float: The crisp value, or NaN if no rules were activated or the
                sum of firing strengths is zero.
        """
        if fuzzy_output.is_empty():
            defuzzifier_log.warning("No active rules to defuzzify <%s>. Outputting NaN.",
                                    fuzzy_output.name)
            return math.nan

        numerator = 0.0
        denominator = 0.0
        for w, z in self._pairs(fuzzy_output, minimum, maximum):
            numerator += w * z
            denominator += w

        if denominator == 0:
            defuzzifier_log.warning("Sum of firing strengths is zero for <%s>. Outputting NaN.",
                                    fuzzy_output.name)
            return math.nan

        final_output = numerator / denominator
        defuzzifier_log.debug(
            "Defuzzified <%s>: %.4f (from %d activated terms)",
            fuzzy_output.name, final_output, len(fuzzy_output),
        )
        return final_output


class WeightedSum(WeightedDefuzzifier):
    """Σ(Wi * Zi) over the activated terms."""

    def defuzzify(self, fuzzy_output: Aggregated, minimum: float = math.nan,
                  maximum: float = math.nan) -> float:
        if fuzzy_output.is_empty():
            defuzzifier_log.warning("No active rules to defuzzify <%s>. Outputting NaN.",
                                    fuzzy_output.name)
            return math.nan

        final_output = sum(w * z for w, z in self._pairs(fuzzy_output, minimum, maximum))
        defuzzifier_log.debug(
            "Defuzzified <%s>: %.4f (from %d activated terms)",
            fuzzy_output.name, final_output, len(fuzzy_output),
        )
        return final_output



class WeightedSumCustom(WeightedDefuzzifier):
    """
    Σ(Wi * Zi) where the product and the sum are replaced by the operators of
    the accumulator.

    For Takagi-Sugeno terms each product is the implication recorded on the
    Activated entry (W*Z without one) and the products are folded with the
    accumulator's aggregation (a plain sum without one). Tsukamoto terms use
    the plain Σ(Wi * Zi).
    """

    def defuzzify(self, fuzzy_output: Aggregated, minimum: float = math.nan,
                  maximum: float = math.nan) -> float:
        if fuzzy_output.is_empty():
            defuzzifier_log.warning("No active rules to defuzzify <%s>. Outputting NaN.",
                                    fuzzy_output.name)
            return math.nan

        kind = self.kind
        if kind == AUTOMATIC:
            kind = infer_type(fuzzy_output.terms[0].term)
        aggregation = fuzzy_output.aggregation

        final_output = 0.0
        if kind == TAKAGI_SUGENO:
            for activated in fuzzy_output.terms:
                w = activated.degree
                z = activated.term.membership(w)
                implication = activated.implication
                wz = implication.compute(w, z) if implication is not None else w * z
                if aggregation is not None:
                    final_output = aggregation.compute(final_output, wz)
                else:
                    final_output += wz
        else:
            for activated in fuzzy_output.terms:
                w = activated.degree
                final_output += w * activated.term.tsukamoto(w, minimum, maximum)

        defuzzifier_log.debug(
            "Defuzzified <%s>: %.4f (from %d activated terms)",
            fuzzy_output.name, final_output, len(fuzzy_output),
        )
        return final_output


for _cls in (WeightedAverage, WeightedSum, WeightedSumCustom):
    DEFUZZIFIERS.register(_cls.__name__, _cls)
