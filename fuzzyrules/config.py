# fuzzyrules/config.py
"""
==================
Configuration loader for fuzzy engines.

Builds a complete Engine from a TOML file so that the rest of the project
stays independent of file formats and configuration layout.

Layout
------
    name = "tipper"

    [[input]]
    name = "service"
    range = [0.0, 10.0]
    enabled = true                      # optional
    [[input.term]]
    name = "poor"
    kind = "Gaussian"                   # any registered term class
    parameters = "0.0 1.5"
    height = 1.0                        # optional

    [[output]]
    name = "tip"
    range = [0.0, 30.0]
    default = nan                       # optional
    lock_previous = false               # optional
    aggregation = ""                    # SNorm class name, "" for none
    defuzzifier = "WeightedAverage"     # optional
    defuzzifier_type = "Automatic"      # optional
    [[output.term]]
    ...

    [[rule_block]]
    name = "main"
    conjunction = "Minimum"             # TNorm class name, "" for none
    disjunction = "Maximum"             # SNorm class name, "" for none
    implication = "AlgebraicProduct"    # TNorm class name, "" for none
    activation = "General"
    activation_parameters = ""
    strict = false                      # raise instead of skipping bad rules
    rules = ["if service is poor then tip is cheap"]

Names are resolved through the registries in fuzzyrules.factory; unknown
names raise ConfigurationError. TOML parsing is done via Python's built-in
`tomllib` module.

Typical Usage
-------------
    from fuzzyrules.config import load_engine

    engine = load_engine("config/engine_config.toml")
    engine.set_input_value("service", 7.5)
    engine.process()
"""
import logging
import math
import tomllib
from typing import Any, Dict, List, Optional

# Imported for their registrations.
import fuzzyrules.activation  # noqa: F401
import fuzzyrules.defuzzifier  # noqa: F401
import fuzzyrules.hedges  # noqa: F401
import fuzzyrules.norms  # noqa: F401
import fuzzyrules.terms  # noqa: F401
from fuzzyrules.engine import Engine
from fuzzyrules.errors import ConfigurationError
from fuzzyrules.factory import ACTIVATIONS, DEFUZZIFIERS, SNORMS, TERMS, TNORMS
from fuzzyrules.rule import Rule, RuleBlock
from fuzzyrules.variables import InputVariable, OutputVariable, Variable

config_log = logging.getLogger("config")


# ------------------------------------------------------------
# Load TOML
# ------------------------------------------------------------
def _load_toml(path: str) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _required(table: Dict[str, Any], key: str, where: str) -> Any:
    try:
        return table[key]
    except KeyError:
        raise ConfigurationError(f"{where} is missing <{key}>") from None


def _range(table: Dict[str, Any], where: str):
    bounds = table.get("range", [-math.inf, math.inf])
    if len(bounds) != 2:
        raise ConfigurationError(f"{where}: range must be [min, max], found {bounds}")
    return float(bounds[0]), float(bounds[1])


def _norm(registry, name: Optional[str]):
    if not name:
        return None
    return registry.construct(name)


def _build_terms(variable: Variable, tables: List[Dict[str, Any]]) -> None:
    for table in tables:
        where = f"term of variable <{variable.name}>"
        name = _required(table, "name", where)
        kind = _required(table, "kind", where)
        term = TERMS.construct(kind)
        term.name = name
        term.configure(str(table.get("parameters", "")))
        if "height" in table:
            term.height = float(table["height"])
        variable.add_term(term)


def _build_input(table: Dict[str, Any]) -> InputVariable:
    name = _required(table, "name", "input variable")
    minimum, maximum = _range(table, f"input variable <{name}>")
    variable = InputVariable(name, minimum, maximum, enabled=bool(table.get("enabled", True)))
    _build_terms(variable, table.get("term", []))
    if "value" in table:
        variable.value = float(table["value"])
    config_log.info("Input <%s> [%s, %s] with %d terms.",
                    name, minimum, maximum, len(variable.terms))
    return variable


def _build_output(table: Dict[str, Any]) -> OutputVariable:
    name = _required(table, "name", "output variable")
    minimum, maximum = _range(table, f"output variable <{name}>")

    defuzzifier = None
    defuzzifier_name = table.get("defuzzifier", "")
    if defuzzifier_name:
        defuzzifier = DEFUZZIFIERS.construct(
            defuzzifier_name, table.get("defuzzifier_type", "Automatic")
        )

    variable = OutputVariable(
        name,
        minimum,
        maximum,
        enabled=bool(table.get("enabled", True)),
        aggregation=_norm(SNORMS, table.get("aggregation", "")),
        defuzzifier=defuzzifier,
        default_value=float(table.get("default", math.nan)),
        lock_previous_value=bool(table.get("lock_previous", False)),
    )
    _build_terms(variable, table.get("term", []))
    config_log.info("Output <%s> [%s, %s] with %d terms, defuzzifier %s.",
                    name, minimum, maximum, len(variable.terms), defuzzifier)
    return variable


def _build_rule_block(table: Dict[str, Any], index: int) -> RuleBlock:
    activation = None
    activation_name = table.get("activation", "")
    if activation_name:
        activation = ACTIVATIONS.construct(activation_name)
        activation.configure(str(table.get("activation_parameters", "")))

    rules = []
    for entry in table.get("rules", []):
        if isinstance(entry, str):
            rules.append(Rule(entry))
        else:
            where = f"rule in block <{table.get('name', index)}>"
            rules.append(Rule(
                _required(entry, "text", where),
                float(entry.get("weight", 1.0)),
                bool(entry.get("enabled", True)),
            ))

    return RuleBlock(
        table.get("name", ""),
        rules,
        conjunction=_norm(TNORMS, table.get("conjunction", "")),
        disjunction=_norm(SNORMS, table.get("disjunction", "")),
        implication=_norm(TNORMS, table.get("implication", "")),
        activation=activation,
        enabled=bool(table.get("enabled", True)),
    )


# ------------------------------------------------------------
# Main loaders
# ------------------------------------------------------------
def engine_from_dict(cfg: Dict[str, Any]) -> Engine:
    """
    Builds an engine from an already parsed configuration mapping.

    Args:
        cfg (Dict[str, Any]): Mapping with the layout described in the module
            docstring.

    Returns:
        Engine: The engine, with every loadable rule loaded.

    Raises:
        ConfigurationError: Missing keys, unknown names or bad parameters.
        RuleSyntaxError: A rule failed to parse in a block with strict = true.
    """
    inputs = [_build_input(t) for t in cfg.get("input", [])]
    outputs = [_build_output(t) for t in cfg.get("output", [])]
    block_tables = cfg.get("rule_block", [])
    blocks = [_build_rule_block(t, i) for i, t in enumerate(block_tables)]

    engine = Engine(cfg.get("name", ""), inputs, outputs, blocks)

    for table, block in zip(block_tables, blocks):
        errors = block.load_rules(engine)
        if errors and table.get("strict", False):
            raise errors[0]
        config_log.info("Rule block <%s>: %d of %d rules loaded.",
                        block.name, len(block.rules) - len(errors), len(block.rules))
    return engine


def load_engine(path: str = "config/engine_config.toml") -> Engine:
    """Reads a TOML engine file and builds the engine it describes."""
    config_log.info("Loading engine from %s", path)
    return engine_from_dict(_load_toml(path))
