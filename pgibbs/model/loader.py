"""
pgibbs/model/loader.py

Parser for the two-section text factor-graph format:

    variables:
    <name>[\t<arity>]
    ...
    factors:
    <name1>/<name2>/...// v0 v1 ... [/// weight]

Table values are listed in the enumeration order of the variables as
written on the line (first listed variable varies fastest). They are
stored in the factor's canonical (sorted by id) order.
"""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pgibbs.algebra.domain import Assignment, Domain, Variable
from pgibbs.algebra.factor import TableFactor
from pgibbs.model.factorized import FactorizedModel

logger = logging.getLogger(__name__)

VARIABLES_HEADER = "variables:"
FACTORS_HEADER = "factors:"
VALUES_SEP = "//"
WEIGHT_SEP = "///"


class ModelFormatError(ValueError):
    """Malformed or truncated model file."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def _trim(s: str) -> str:
    return s.strip(" \t\r\n")


def _parse_variable_line(line: str, line_number: int, default_arity: int) -> Tuple[str, int]:
    """Split '<name>[\\t<arity>]' into name and arity."""
    cut = line.rfind("\t")
    if cut < 0:
        return _trim(line), default_arity
    name = _trim(line[:cut])
    raw = _trim(line[cut:])
    try:
        arity = int(raw)
    except ValueError:
        raise ModelFormatError(f"invalid arity {raw!r} for variable {name!r}", line_number) from None
    if arity < 1:
        raise ModelFormatError(f"arity of {name!r} must be >= 1, got {arity}", line_number)
    return name, arity


def _parse_factor_line(
    line: str,
    line_number: int,
    var_map: Dict[str, Variable],
) -> Tuple[TableFactor, Optional[float]]:
    """Parse one factor line into a canonical-order factor and its weight."""
    sep = line.find(VALUES_SEP)
    if sep < 0:
        raise ModelFormatError(f"missing {VALUES_SEP!r} separator in factor line", line_number)

    args: List[Variable] = []
    for raw in line[:sep].split("/"):
        name = _trim(raw)
        if name not in var_map:
            raise ModelFormatError(f"unknown variable {name!r}", line_number)
        var = var_map[name]
        if var in args:
            raise ModelFormatError(f"variable {name!r} appears twice in one factor", line_number)
        args.append(var)

    start = sep + len(VALUES_SEP)
    weight_pos = line.find(WEIGHT_SEP, start)
    weight: Optional[float] = None
    if weight_pos < 0:
        value_text = line[start:]
    else:
        value_text = line[start:weight_pos]
        raw_weight = _trim(line[weight_pos + len(WEIGHT_SEP):])
        try:
            weight = float(raw_weight)
        except ValueError:
            raise ModelFormatError(f"invalid factor weight {raw_weight!r}", line_number) from None

    try:
        values = [float(tok) for tok in value_text.split()]
    except ValueError as e:
        raise ModelFormatError(f"invalid table value ({e})", line_number) from None

    domain = Domain(args)
    n = domain.size()
    if len(values) < n:
        raise ModelFormatError(
            f"factor over {len(args)} variables needs {n} values, found {len(values)}",
            line_number,
        )
    if len(values) > n:
        logger.warning("line %d: ignoring %d trailing table values", line_number, len(values) - n)

    factor = TableFactor(domain)
    # File order enumerates the first listed variable fastest
    file_order = itertools.product(*(range(v.arity) for v in reversed(args)))
    for value, rev_asg in zip(values, file_order):
        by_id = {v.id: x for v, x in zip(reversed(args), rev_asg)}
        asg = Assignment(domain, [by_id[v.id] for v in domain.variables])
        factor[asg] = value
    return factor, weight


def parse_alchemy(text: str, default_arity: int = 2) -> FactorizedModel:
    """
    Parse a model description into a FactorizedModel.

    Args:
        text: Full file contents
        default_arity: Arity for variable lines without an explicit size

    Returns:
        The populated model

    Raises:
        ModelFormatError: on any malformed or truncated input
    """
    lines = text.splitlines()

    if not lines or _trim(lines[0]) != VARIABLES_HEADER:
        raise ModelFormatError(f"expected {VARIABLES_HEADER!r} header", 1)
    pos = 1

    var_map: Dict[str, Variable] = {}
    names: List[str] = []
    while True:
        if pos >= len(lines):
            raise ModelFormatError(f"reached end of file before {FACTORS_HEADER!r} header", pos)
        line = _trim(lines[pos])
        pos += 1
        if line == FACTORS_HEADER:
            break
        if not line:
            raise ModelFormatError("empty line in variables section", pos)
        name, arity = _parse_variable_line(line, pos, default_arity)
        if name in var_map:
            raise ModelFormatError(f"variable {name!r} declared twice", pos)
        var_map[name] = Variable(len(names), arity)
        names.append(name)

    model = FactorizedModel()
    model.set_var_names(names)
    while pos < len(lines):
        line = _trim(lines[pos])
        pos += 1
        if not line:
            continue
        factor, weight = _parse_factor_line(line, pos, var_map)
        model.add_factor(factor, weight)

    logger.debug(
        "parsed model: %d declared variables, %d used, %d factors",
        len(names), model.num_variables, model.num_factors,
    )
    return model


def load_alchemy(path: Union[str, Path], default_arity: int = 2) -> FactorizedModel:
    """Read and parse a model file."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    logger.info("loading model from %s", path)
    return parse_alchemy(text, default_arity=default_arity)
