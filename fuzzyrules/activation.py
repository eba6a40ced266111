"""
Activation strategies: which rules of a block fire, and in what order.

Every strategy follows the same cycle for each rule it visits:

    1) reset the rule's state from the previous cycle (deactivate)
    2) if the rule is loaded, compute and store its activation degree
    3) if the strategy's predicate accepts the degree, trigger the rule

Strategies differ only in iteration order and predicate. The order matters:
a rule whose antecedent reads an output variable sees the conclusions of the
rules triggered before it in the same cycle.

Each strategy is configured from a space separated parameter string with a
fixed number of positional values, and parameters() produces a string that
configures an equal strategy.
"""

import copy
import logging
from typing import Callable, Dict, List, Tuple

from fuzzyrules import op
from fuzzyrules.errors import ConfigurationError
from fuzzyrules.factory import ACTIVATIONS

activation_log = logging.getLogger("activation")
WZ_log = logging.getLogger("WZ_engine")


class Activation:
    """Base strategy."""

    required = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def parameters(self) -> str:
        return ""

    def configure(self, parameters: str) -> None:
        values = parameters.split()
        if not values:
            return
        if len(values) < self.required:
            raise ConfigurationError(
                f"activation <{self.name}> requires <{self.required}> parameters"
            )
        self._configure(values)

    def _configure(self, values: List[str]) -> None:
        pass

    def activate(self, rule_block) -> None:
        raise NotImplementedError

    def _state(self) -> tuple:
        return ()

    def copy(self) -> "Activation":
        return copy.copy(self)

    def __eq__(self, other):
        return type(self) is type(other) and self._state() == other._state()

    def __hash__(self):
        return hash((type(self), self._state()))

    def __repr__(self):
        parameters = self.parameters()
        return f"{self.name}({parameters})" if parameters else self.name


def _log_rule(index: int, rule, degree: float) -> None:
    if rule.triggered:
        WZ_log.debug("Rule# %d W= %s fired | %s", index, op.fmt(degree), rule.text)
    else:
        WZ_log.debug("Rule# %d W= %s", index, op.fmt(degree))


def _evaluate_all(rule_block) -> List[Tuple[int, object]]:
    """Resets every rule and computes the degree of the loaded ones, in order."""
    loaded = []
    for index, rule in enumerate(rule_block.rules):
        rule.deactivate()
        if rule.is_loaded():
            rule.activate_with(rule_block.conjunction, rule_block.disjunction)
            loaded.append((index, rule))
    return loaded


class General(Activation):
    """Fires every rule with a positive degree, in insertion order."""

    def activate(self, rule_block) -> None:
        conjunction = rule_block.conjunction
        disjunction = rule_block.disjunction
        implication = rule_block.implication
        for index, rule in enumerate(rule_block.rules):
            rule.deactivate()
            if rule.is_loaded():
                degree = rule.activate_with(conjunction, disjunction)
                if op.is_gt(degree, 0.0):
                    rule.trigger(implication)
                _log_rule(index, rule, degree)


class First(Activation):
    """
    Fires the first `number_of_rules` rules, in insertion order, whose degree
    is positive and at least `threshold`.

    Parameters: "number_of_rules threshold"
    """

    required = 2
    reverse = False

    def __init__(self, number_of_rules: int = 1, threshold: float = 0.0):
        self.number_of_rules = number_of_rules
        self.threshold = threshold

    def _state(self):
        return (self.number_of_rules, self.threshold)

    def parameters(self) -> str:
        return f"{self.number_of_rules} {op.fmt_exact(self.threshold)}"

    def _configure(self, values):
        self.number_of_rules = int(values[0])
        self.threshold = op.to_float(values[1])

    def activate(self, rule_block) -> None:
        conjunction = rule_block.conjunction
        disjunction = rule_block.disjunction
        implication = rule_block.implication

        indexed = list(enumerate(rule_block.rules))
        if self.reverse:
            indexed.reverse()

        activated = 0
        for index, rule in indexed:
            rule.deactivate()
            if rule.is_loaded():
                # Degrees are updated for every loaded rule, even past the cap.
                degree = rule.activate_with(conjunction, disjunction)
                if (activated < self.number_of_rules
                        and op.is_gt(degree, 0.0)
                        and op.is_ge(degree, self.threshold)):
                    rule.trigger(implication)
                    activated += 1
                _log_rule(index, rule, degree)


class Last(First):
    """
    Fires the last `number_of_rules` rules whose degree is positive and at
    least `threshold`, iterating in reverse insertion order.

    Parameters: "number_of_rules threshold"
    """

    reverse = True


class Highest(Activation):
    """
    Fires the `number_of_rules` rules with the highest positive degrees.
    Ties keep insertion order.

    Parameters: "number_of_rules"
    """

    required = 1
    highest = True

    def __init__(self, number_of_rules: int = 1):
        self.number_of_rules = number_of_rules

    def _state(self):
        return (self.number_of_rules,)

    def parameters(self) -> str:
        return str(self.number_of_rules)

    def _configure(self, values):
        self.number_of_rules = int(values[0])

    def activate(self, rule_block) -> None:
        loaded = _evaluate_all(rule_block)
        candidates = [(i, r) for i, r in loaded if op.is_gt(r.activation_degree, 0.0)]
        sign = -1.0 if self.highest else 1.0
        # sorted() is stable, so equal degrees stay in insertion order.
        candidates = sorted(candidates, key=lambda item: sign * item[1].activation_degree)
        for index, rule in candidates[: self.number_of_rules]:
            rule.trigger(rule_block.implication)
        for index, rule in loaded:
            _log_rule(index, rule, rule.activation_degree)


class Lowest(Highest):
    """Fires the `number_of_rules` rules with the lowest positive degrees."""

    highest = False


COMPARISONS: Dict[str, Callable[[float, float], bool]] = {
    "<": op.is_lt,
    "<=": op.is_le,
    "==": op.is_eq,
    "!=": lambda a, b: not op.is_eq(a, b),
    ">=": op.is_ge,
    ">": op.is_gt,
}


class Threshold(Activation):
    """
    Fires every rule whose positive degree satisfies `comparison threshold`.

    Parameters: "comparison threshold", e.g. ">= 0.5"
    """

    required = 2

    def __init__(self, comparison: str = ">=", threshold: float = 0.0):
        self._check(comparison)
        self.comparison = comparison
        self.threshold = threshold

    def _state(self):
        return (self.comparison, self.threshold)

    @staticmethod
    def _check(comparison: str) -> None:
        if comparison not in COMPARISONS:
            raise ConfigurationError(
                f"comparison <{comparison}> not supported; "
                f"expected one of {list(COMPARISONS)}"
            )

    def parameters(self) -> str:
        return f"{self.comparison} {op.fmt_exact(self.threshold)}"

    def _configure(self, values):
        self._check(values[0])
        self.comparison = values[0]
        self.threshold = op.to_float(values[1])

    def accepts(self, degree: float) -> bool:
        return COMPARISONS[self.comparison](degree, self.threshold)

    def activate(self, rule_block) -> None:
        for index, rule in enumerate(rule_block.rules):
            rule.deactivate()
            if rule.is_loaded():
                degree = rule.activate_with(rule_block.conjunction, rule_block.disjunction)
                if op.is_gt(degree, 0.0) and self.accepts(degree):
                    rule.trigger(rule_block.implication)
                _log_rule(index, rule, degree)


class Proportional(Activation):
    """
    Rescales the degrees of all loaded rules so they sum to 1.0, then fires
    every rule with a positive rescaled degree.
    """

    def activate(self, rule_block) -> None:
        loaded = _evaluate_all(rule_block)
        total = sum(rule.activation_degree for _, rule in loaded)
        if op.is_gt(total, 0.0):
            for _, rule in loaded:
                rule.activation_degree /= total
        for index, rule in loaded:
            if op.is_gt(rule.activation_degree, 0.0):
                rule.trigger(rule_block.implication)
            _log_rule(index, rule, rule.activation_degree)


def create_activation(name: str, parameters: str = "") -> Activation:
    """Builds a registered strategy and configures it."""
    activation = ACTIVATIONS.construct(name)
    activation.configure(parameters)
    activation_log.info("Activation %s configured with <%s>", name, activation.parameters())
    return activation


for _cls in (General, First, Last, Highest, Lowest, Threshold, Proportional):
    ACTIVATIONS.register(_cls.__name__, _cls)
