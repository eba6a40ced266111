"""
Orchestrates one evaluation cycle of a fuzzy engine.

This module ties the variables, rule blocks and defuzzifiers together. A cycle
fuzzifies the current input values (for logging), empties every output
accumulator, activates the rule blocks in order and defuzzifies every output
variable. It is the only place accumulators are reset.
"""

import copy
import logging
from typing import Dict, Iterable, List, Optional

from fuzzyrules import op
from fuzzyrules.errors import RuleSyntaxError
from fuzzyrules.rule import Rule, RuleBlock
from fuzzyrules.variables import InputVariable, OutputVariable, Variable
from utils.logger import set_cycle_index

engine_log = logging.getLogger("engine")


class Engine:
    """
    A complete fuzzy inference system.

    Attributes:
        name (str): Name of the engine.
        input_variables (List[InputVariable]): Inputs, in declaration order.
        output_variables (List[OutputVariable]): Outputs, in declaration order.
        rule_blocks (List[RuleBlock]): Rule blocks, activated in order.
        cycle (int): Number of completed process() calls.
    """

    def __init__(
        self,
        name: str = "",
        input_variables: Optional[Iterable[InputVariable]] = None,
        output_variables: Optional[Iterable[OutputVariable]] = None,
        rule_blocks: Optional[Iterable[RuleBlock]] = None,
    ):
        self.name = name
        self.input_variables: List[InputVariable] = list(input_variables or [])
        self.output_variables: List[OutputVariable] = list(output_variables or [])
        self.rule_blocks: List[RuleBlock] = list(rule_blocks or [])
        self.cycle = 0
        self.update_references()
        engine_log.info(
            "Engine <%s> initialized with %d inputs, %d outputs and %d rule blocks.",
            self.name, len(self.input_variables), len(self.output_variables),
            len(self.rule_blocks),
        )

    # ------------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------------
    def find_input_variable(self, name: str) -> Optional[InputVariable]:
        for variable in self.input_variables:
            if variable.name == name:
                return variable
        return None

    def find_output_variable(self, name: str) -> Optional[OutputVariable]:
        for variable in self.output_variables:
            if variable.name == name:
                return variable
        return None

    def find_variable(self, name: str) -> Optional[Variable]:
        """Input variables take precedence over output variables of the same name."""
        variable = self.find_input_variable(name)
        if variable is None:
            variable = self.find_output_variable(name)
        return variable

    def input_variable(self, name: str) -> InputVariable:
        variable = self.find_input_variable(name)
        if variable is None:
            raise KeyError(f"input variable <{name}> not found")
        return variable

    def output_variable(self, name: str) -> OutputVariable:
        variable = self.find_output_variable(name)
        if variable is None:
            raise KeyError(f"output variable <{name}> not found")
        return variable

    def variable(self, name: str) -> Variable:
        variable = self.find_variable(name)
        if variable is None:
            raise KeyError(f"variable <{name}> not found")
        return variable

    def rule_block(self, name: str) -> RuleBlock:
        for block in self.rule_blocks:
            if block.name == name:
                return block
        raise KeyError(f"rule block <{name}> not found")

    # ------------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------------
    def add_input_variable(self, variable: InputVariable) -> InputVariable:
        self.input_variables.append(variable)
        self.update_references()
        return variable

    def add_output_variable(self, variable: OutputVariable) -> OutputVariable:
        self.output_variables.append(variable)
        self.update_references()
        return variable

    def add_rule_block(self, block: RuleBlock) -> RuleBlock:
        self.rule_blocks.append(block)
        return block

    def update_references(self) -> None:
        """Gives terms that read the engine (Linear) a reference to it."""
        for variable in self.input_variables + self.output_variables:
            for term in variable.terms:
                term.update_reference(self)

    def load_rules(self) -> List[RuleSyntaxError]:
        """Loads the rules of every block, returning the errors of skipped rules."""
        errors = []
        for block in self.rule_blocks:
            errors.extend(block.load_rules(self))
        return errors

    # ------------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------------
    def set_input_value(self, name: str, value: float) -> None:
        self.input_variable(name).value = value

    def output_value(self, name: str) -> float:
        return self.output_variable(name).value

    def restart(self) -> None:
        """Clears every input and output as if the engine had just been built."""
        for variable in self.input_variables:
            variable.value = float("nan")
        for variable in self.output_variables:
            variable.clear()
        for block in self.rule_blocks:
            for rule in block.rules:
                rule.deactivate()

    def process(self) -> Dict[str, float]:
        """
        Executes one full cycle of the fuzzy inference system.

        Returns:
            Dict[str, float]: Output variable name to crisp value.
        """
        self.cycle += 1
        set_cycle_index(self.cycle)
        engine_log.debug("--- Cycle Start (%s) ---", ", ".join(
            f"{v.name}= {op.fmt(v.value)}" for v in self.input_variables))

        # 1) Fuzzification (for the record; propositions fuzzify on demand)
        for variable in self.input_variables:
            if variable.is_enabled():
                variable.fuzzy_input_value()

        # 2) Rule evaluation
        for variable in self.output_variables:
            variable.clear_fuzzy_output()
        for block in self.rule_blocks:
            if block.enabled:
                block.activate()

        # 3) Defuzzification
        outputs = {}
        for variable in self.output_variables:
            outputs[variable.name] = variable.defuzzify()

        engine_log.debug("--- Cycle End (%s) ---", ", ".join(
            f"{k}= {op.fmt(v)}" for k, v in outputs.items()))
        return outputs

    def copy(self) -> "Engine":
        """
        Independent engine: variables, accumulators, operators and strategies
        are copied and every rule is parsed again against the copied variables.
        """
        result = Engine.__new__(Engine)
        result.name = self.name
        result.cycle = 0
        memo = {id(self): result}
        result.input_variables = copy.deepcopy(self.input_variables, memo)
        result.output_variables = copy.deepcopy(self.output_variables, memo)
        result.rule_blocks = []
        for block in self.rule_blocks:
            result.rule_blocks.append(RuleBlock(
                block.name,
                [Rule(r.text, r.weight, r.enabled) for r in block.rules],
                copy.deepcopy(block.conjunction),
                copy.deepcopy(block.disjunction),
                copy.deepcopy(block.implication),
                block.activation.copy() if block.activation is not None else None,
                block.enabled,
            ))
        result.update_references()
        result.load_rules()
        return result

    def __repr__(self):
        return f"Engine({self.name!r})"
