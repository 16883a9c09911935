"""
pgibbs/model/factorized.py

A factorized distribution: an append-only list of log-space factors
with reverse indices from variables to the factors that touch them.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple, Union

from pgibbs.algebra.domain import Variable, VarID
from pgibbs.algebra.factor import TableFactor


class FactorizedModel:
    """
    Collection of factors over discrete variables.

    Maintains:
    - Factors in insertion order (factor id = position)
    - The set of variables appearing in any factor
    - Variable-to-factor incidence
    - Display names indexed by variable id
    - The optional per-factor weight read from the model file
    """

    def __init__(self):
        self._variables: Dict[VarID, Variable] = {}
        self._factors: List[TableFactor] = []
        self._var_to_factor: Dict[VarID, List[int]] = {}
        self._var_name: List[str] = []
        self._weights: List[Optional[float]] = []

    def add_factor(self, factor: TableFactor, weight: Optional[float] = None) -> int:
        """Append a factor and register it under each of its variables."""
        self._factors.append(factor)
        self._weights.append(weight)
        factor_id = len(self._factors) - 1
        for var in factor.domain.variables:
            known = self._variables.get(var.id)
            if known is not None and known.arity != var.arity:
                raise ValueError(
                    f"Variable {var.id} registered with arity {known.arity}, "
                    f"factor {factor_id} uses arity {var.arity}"
                )
            self._variables[var.id] = var
            self._var_to_factor.setdefault(var.id, []).append(factor_id)
        return factor_id

    def factors(self) -> Tuple[TableFactor, ...]:
        return tuple(self._factors)

    def variables(self) -> List[Variable]:
        """Variables sorted by id."""
        return [self._variables[k] for k in sorted(self._variables)]

    def variable(self, var_id: VarID) -> Variable:
        return self._variables[var_id]

    def factor_ids(self, var: Union[Variable, VarID]) -> List[int]:
        """Ids of the factors touching a variable."""
        var_id = var.id if isinstance(var, Variable) else var
        if var_id not in self._var_to_factor:
            raise KeyError(f"Variable {var_id} is not registered in the model")
        return list(self._var_to_factor[var_id])

    def factor_weight(self, factor_id: int) -> Optional[float]:
        return self._weights[factor_id]

    def weights(self) -> Tuple[Optional[float], ...]:
        return tuple(self._weights)

    def set_var_names(self, names: Sequence[str]) -> None:
        self._var_name = list(names)

    def var_names(self) -> Tuple[str, ...]:
        return tuple(self._var_name)

    def var_name(self, var_id: VarID) -> str:
        """Display name of a variable."""
        if not 0 <= var_id < len(self._var_name):
            raise KeyError(f"No name recorded for variable {var_id}")
        return self._var_name[var_id]

    def var_to_factor(self) -> Dict[VarID, List[int]]:
        """Copy of the reverse index, keyed by variable id."""
        return {k: list(v) for k, v in sorted(self._var_to_factor.items())}

    @property
    def num_variables(self) -> int:
        return len(self._variables)

    @property
    def num_factors(self) -> int:
        return len(self._factors)

    def validate(self) -> None:
        """Check that variable ids are exactly 0..n-1."""
        ids = sorted(self._variables)
        for expected, actual in enumerate(ids):
            if expected != actual:
                raise ValueError(
                    f"Variable ids must be dense 0..{len(ids) - 1}: missing id {expected}"
                )

    @classmethod
    def from_parts(
        cls,
        variables: Sequence[Variable],
        factors: Sequence[TableFactor],
        var_to_factor: Dict[VarID, List[int]],
        var_names: Sequence[str],
        weights: Optional[Sequence[Optional[float]]] = None,
    ) -> "FactorizedModel":
        """Rebuild a model from its stored fields, checking they agree."""
        model = cls()
        for fid, f in enumerate(factors):
            model.add_factor(f, None if weights is None else weights[fid])
        if {v.id: v for v in variables} != model._variables:
            raise ValueError("Stored variable set does not match factor domains")
        if {k: list(v) for k, v in var_to_factor.items()} != model._var_to_factor:
            raise ValueError("Stored reverse index does not match factor domains")
        model.set_var_names(var_names)
        return model

    def __repr__(self) -> str:
        return f"FactorizedModel(vars={self.num_variables}, factors={self.num_factors})"
