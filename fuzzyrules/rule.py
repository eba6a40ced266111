"""
Rules and rule blocks.

A rule is written as

    if <antecedent> then <consequent> [with <weight>]

and anything after "#" is a comment. Loading a rule splits the text on its
keywords and parses both parts against the engine's variables. At run time the
block's activation strategy asks each rule for its activation degree (weight x
antecedent degree) and, for the rules it selects, triggers the consequent,
which appends the conclusions to the output accumulators.
"""

import logging
from typing import Iterable, List, Optional

from fuzzyrules import op
from fuzzyrules.antecedent import Antecedent
from fuzzyrules.consequent import Consequent
from fuzzyrules.errors import ConfigurationError, InvariantError, RuleSyntaxError
from fuzzyrules.norms import SNorm, TNorm

rule_log = logging.getLogger("rule")

IF = "if"
THEN = "then"
WITH = "with"
COMMENT = "#"


class Rule:
    """
    A single fuzzy rule.

    Attributes:
        text (str): The rule text as given.
        weight (float): Multiplies the antecedent degree, 1.0 by default.
        enabled (bool): Disabled rules are evaluated but never triggered.
        antecedent (Antecedent): The "if" part.
        consequent (Consequent): The "then" part.
        activation_degree (float): Degree computed in the last cycle.
        triggered (bool): Whether the rule fired in the last cycle.
    """

    def __init__(self, text: str = "", weight: float = 1.0, enabled: bool = True):
        self.text = text
        self.weight = weight
        self.enabled = enabled
        self.antecedent = Antecedent()
        self.consequent = Consequent()
        self.activation_degree = 0.0
        self.triggered = False

    @classmethod
    def create(cls, text: str, engine) -> "Rule":
        """Builds and parses a rule, raising RuleSyntaxError on failure."""
        rule = cls(text)
        rule.parse(engine)
        return rule

    def is_loaded(self) -> bool:
        return self.antecedent.is_loaded() and self.consequent.is_loaded()

    def unload(self) -> None:
        self.deactivate()
        self.antecedent.unload()
        self.consequent.unload()

    def parse(self, engine) -> None:
        """
        Splits the text into antecedent, consequent and weight, and parses both
        parts. A "with" clause overrides the current weight; without one the
        weight is left as constructed.

        Raises:
            RuleSyntaxError: If any part is malformed. The rule is left
                unloaded.
        """
        self.unload()
        text = self.text.split(COMMENT, 1)[0]
        tokens = text.split()
        antecedent: List[str] = []
        consequent: List[str] = []
        weight: Optional[float] = None

        S_NONE, S_IF, S_THEN, S_WITH, S_END = range(5)
        state = S_NONE
        for position, token in enumerate(tokens):
            if state == S_NONE:
                if token != IF:
                    raise RuleSyntaxError(
                        f"expected keyword <{IF}>, but found <{token}>",
                        self.text, token, position, expected=f"keyword <{IF}>",
                    )
                state = S_IF
            elif state == S_IF:
                if token == THEN:
                    state = S_THEN
                else:
                    antecedent.append(token)
            elif state == S_THEN:
                if token == WITH:
                    state = S_WITH
                else:
                    consequent.append(token)
            elif state == S_WITH:
                try:
                    weight = op.to_float(token)
                except ValueError:
                    raise RuleSyntaxError(
                        f"expected numeric weight, but found <{token}>",
                        self.text, token, position, expected="weight",
                    ) from None
                state = S_END
            else:
                raise RuleSyntaxError(
                    f"unexpected token <{token}> after the weight",
                    self.text, token, position, expected="end of rule",
                )

        if state == S_NONE:
            raise RuleSyntaxError(f"keyword <{IF}> not found in rule", self.text)
        if state == S_IF:
            raise RuleSyntaxError(f"keyword <{THEN}> not found in rule", self.text)
        if state == S_WITH:
            raise RuleSyntaxError(
                f"expected numeric weight after <{WITH}>", self.text, expected="weight"
            )

        try:
            self.antecedent.load(engine, " ".join(antecedent))
            self.consequent.load(engine, " ".join(consequent))
        except RuleSyntaxError as error:
            self.unload()
            raise error.with_text(self.text) from error
        if weight is not None:
            self.weight = weight

    def load(self, engine) -> Optional[RuleSyntaxError]:
        """
        Parses the rule without raising.

        Returns:
            Optional[RuleSyntaxError]: None if the rule loaded, otherwise the
                error describing why it was left unloaded.
        """
        try:
            self.parse(engine)
        except RuleSyntaxError as error:
            rule_log.warning("Rule not loaded: %s | %s", self.text, error)
            return error
        return None

    def deactivate(self) -> None:
        """Resets the state computed in the previous cycle."""
        self.activation_degree = 0.0
        self.triggered = False

    reset_fired_state = deactivate

    def activate_with(self, conjunction: Optional[TNorm], disjunction: Optional[SNorm]) -> float:
        """
        Computes and stores weight x antecedent degree.

        Returns:
            float: The activation degree of the rule.
        """
        if not self.is_loaded():
            raise InvariantError(f"[rule error] the following rule is not loaded: {self.text}")
        self.activation_degree = self.weight * self.antecedent.activation_degree(
            conjunction, disjunction
        )
        return self.activation_degree

    compute_degree = activate_with

    def trigger(self, implication: Optional[TNorm]) -> None:
        """Appends the conclusions to the output accumulators if enabled."""
        if not self.is_loaded():
            raise InvariantError(f"[rule error] the following rule is not loaded: {self.text}")
        if self.enabled:
            self.triggered = True
            self.consequent.modify(self.activation_degree, implication)

    fire = trigger

    def is_triggered(self) -> bool:
        return self.triggered

    def copy(self) -> "Rule":
        """Rule sharing variables and terms but owning a fresh tree."""
        result = Rule(self.text, self.weight, self.enabled)
        result.antecedent = self.antecedent.copy()
        result.consequent = self.consequent.copy()
        result.activation_degree = self.activation_degree
        result.triggered = self.triggered
        return result

    def __str__(self):
        if not self.is_loaded():
            return self.text
        result = f"{IF} {self.antecedent} {THEN} {self.consequent}"
        if not op.is_eq(self.weight, 1.0):
            result += f" {WITH} {op.fmt_exact(self.weight)}"
        return result

    def __repr__(self):
        return f"Rule({self.text!r})"


class RuleBlock:
    """
    An ordered set of rules sharing operators and an activation strategy.

    Attributes:
        name (str): Name of the block.
        rules (List[Rule]): Rules in insertion order; strategies iterate by
            position and never reorder them.
        conjunction (Optional[TNorm]): Operator for "and" in antecedents.
        disjunction (Optional[SNorm]): Operator for "or" in antecedents.
        implication (Optional[TNorm]): Operator recorded on every conclusion.
        activation: Strategy selecting which rules fire.
        enabled (bool): Disabled blocks are skipped by activate().
    """

    def __init__(
        self,
        name: str = "",
        rules: Optional[Iterable[Rule]] = None,
        conjunction: Optional[TNorm] = None,
        disjunction: Optional[SNorm] = None,
        implication: Optional[TNorm] = None,
        activation=None,
        enabled: bool = True,
    ):
        self.name = name
        self.rules: List[Rule] = list(rules or [])
        self.conjunction = conjunction
        self.disjunction = disjunction
        self.implication = implication
        self.activation = activation
        self.enabled = enabled

        rule_log.info("Rule block <%s> initialized with %d rules.", self.name, len(self.rules))

    def add_rule(self, rule: Rule) -> Rule:
        self.rules.append(rule)
        return rule

    def load_rules(self, engine) -> List[RuleSyntaxError]:
        """
        Loads every rule, skipping the ones that fail to parse.

        Returns:
            List[RuleSyntaxError]: One entry per rule left unloaded.
        """
        errors = []
        for rule in self.rules:
            error = rule.load(engine)
            if error is not None:
                errors.append(error)
        if errors:
            rule_log.warning(
                "Rule block <%s>: %d of %d rules not loaded.",
                self.name, len(errors), len(self.rules),
            )
        return errors

    def unload_rules(self) -> None:
        for rule in self.rules:
            rule.unload()

    def reload_rules(self, engine) -> List[RuleSyntaxError]:
        self.unload_rules()
        return self.load_rules(engine)

    def activate(self) -> None:
        """Runs one cycle of the activation strategy over the rules."""
        if not self.enabled:
            return
        if self.activation is None:
            raise ConfigurationError(
                f"rule block <{self.name}> requires an activation method"
            )
        rule_log.debug(
            "Activating <%s> with %s %s", self.name,
            self.activation.name, self.activation.parameters(),
        )
        self.activation.activate(self)

    def copy(self) -> "RuleBlock":
        """Block with copied rules and strategy, sharing variables and operators."""
        activation = self.activation.copy() if self.activation is not None else None
        return RuleBlock(
            self.name, [r.copy() for r in self.rules], self.conjunction,
            self.disjunction, self.implication, activation, self.enabled,
        )

    def degrees(self) -> List[float]:
        return [r.activation_degree for r in self.rules]

    def __repr__(self):
        return f"RuleBlock({self.name!r}, {len(self.rules)} rules)"
