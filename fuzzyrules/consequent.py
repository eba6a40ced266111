"""
Consequent of a rule: the list of conclusions a fired rule contributes.

Grammar (after "then", up to but excluding "with"):

    variable is [hedge]* term [and variable is [hedge]* term]*

Here "and" separates independent conclusions, so the scan is a plain linear
pass with no postfix step and no tree. Only output variables may appear.
"""

import logging
from typing import List, Optional

from fuzzyrules.errors import InvariantError, RuleSyntaxError
from fuzzyrules.expression import IS, Proposition
from fuzzyrules.factory import HEDGES
from fuzzyrules.hedges import fold_hedges
from fuzzyrules.norms import TNorm
from fuzzyrules.postfix import AND
from fuzzyrules.terms import Activated

consequent_log = logging.getLogger("consequent")

S_VARIABLE, S_IS, S_HEDGE_TERM, S_AND = "variable", "is", "hedge-or-term", "and"


class Consequent:
    """
    Attributes:
        text (str): The consequent text, without "then" and without the weight.
        conclusions (List[Proposition]): Parsed conclusions, empty while unloaded.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.conclusions: List[Proposition] = []

    def is_loaded(self) -> bool:
        return bool(self.conclusions)

    def unload(self) -> None:
        self.conclusions = []

    def load(self, engine, text: Optional[str] = None) -> None:
        """
        Parses the consequent into conclusions.

        Args:
            engine: Provides find_output_variable(name).
            text (Optional[str]): New consequent text; defaults to self.text.

        Raises:
            RuleSyntaxError: If the text is malformed. Any conclusions parsed
                so far are discarded.
        """
        self.unload()
        if text is not None:
            self.text = text
        consequent_log.debug("Consequent: %s", self.text)
        try:
            self._parse(engine)
        except RuleSyntaxError:
            self.unload()
            raise

    def _parse(self, engine) -> None:
        if not self.text.strip():
            raise RuleSyntaxError("consequent is empty", self.text)

        state = S_VARIABLE
        proposition: Optional[Proposition] = None
        tokens = self.text.split()
        token = ""

        for position, token in enumerate(tokens):
            if state == S_VARIABLE:
                variable = engine.find_output_variable(token)
                if variable is not None:
                    proposition = Proposition(variable)
                    self.conclusions.append(proposition)
                    state = S_IS
                    continue
                raise RuleSyntaxError(
                    f"consequent expected output variable, but found <{token}>",
                    self.text, token, position, expected="output variable",
                )

            if state == S_IS:
                if token == IS:
                    state = S_HEDGE_TERM
                    continue
                raise RuleSyntaxError(
                    f"consequent expected keyword <{IS}>, but found <{token}>",
                    self.text, token, position, expected=f"keyword <{IS}>",
                )

            if state == S_HEDGE_TERM:
                if HEDGES.has(token):
                    proposition.hedges.append(HEDGES.construct(token))
                    continue
                if proposition.variable.has_term(token):
                    proposition.term = proposition.variable.get_term(token)
                    state = S_AND
                    continue
                raise RuleSyntaxError(
                    f"consequent expected hedge or term, but found <{token}>",
                    self.text, token, position, expected="hedge or term",
                )

            if state == S_AND:
                if token == AND:
                    state = S_VARIABLE
                    continue
                raise RuleSyntaxError(
                    f"consequent expected operator <{AND}> or keyword <with>, "
                    f"but found <{token}>",
                    self.text, token, position, expected=f"operator <{AND}>",
                )

        if state != S_AND:
            expected = {
                S_VARIABLE: "output variable",
                S_IS: f"keyword <{IS}>",
                S_HEDGE_TERM: "hedge or term",
            }[state]
            raise RuleSyntaxError(
                f"consequent expected {expected} after <{token}>",
                self.text, token, len(tokens) - 1, expected=expected,
            )

    def modify(self, activation_degree: float, implication: Optional[TNorm]) -> None:
        """
        Appends one Activated entry per conclusion to its output variable.

        Each conclusion folds its own hedges over the rule's activation degree;
        conclusions on disabled output variables are skipped.
        """
        if not self.is_loaded():
            raise InvariantError(f"[consequent error] consequent <{self.text}> is not loaded")
        for proposition in self.conclusions:
            variable = proposition.variable
            if not variable.is_enabled():
                continue
            degree = fold_hedges(proposition.hedges, activation_degree)
            activated = Activated(proposition.term, degree, implication)
            variable.fuzzy_output.append(activated)
            consequent_log.debug("Aggregating %s into <%s>", activated, variable.name)

    def copy(self) -> "Consequent":
        result = Consequent(self.text)
        result.conclusions = [p.copy() for p in self.conclusions]
        return result

    def __str__(self):
        if not self.is_loaded():
            return self.text
        return f" {AND} ".join(str(p) for p in self.conclusions)
