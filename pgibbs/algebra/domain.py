"""
pgibbs/algebra/domain.py

Discrete variables, canonically ordered domains and linear-indexed assignments.

Key types:
- Variable: (id, arity) pair, ordered by id
- Domain: variables sorted by id; defines a mixed-radix index space
- Assignment: one value per domain variable plus its linear index

Linear indices use mixed-radix encoding over the canonical order with the
first (lowest id) variable as the least significant digit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple

import numpy as np

VarID = int


@dataclass(frozen=True, order=True)
class Variable:
    """
    A finite discrete variable.

    Attributes:
        id: Dense zero-based identifier (doubles as the vertex id)
        arity: Size of the variable's domain
    """
    id: VarID
    arity: int = 2

    def __post_init__(self):
        if self.id < 0:
            raise ValueError(f"Variable id must be non-negative, got {self.id}")
        if self.arity < 1:
            raise ValueError(f"Variable {self.id}: arity must be >= 1, got {self.arity}")


class Domain:
    """
    Canonically ordered set of variables.

    The order in which variables are passed in does not matter: they are
    sorted by id on construction, and that order fixes the linearization.
    """

    __slots__ = ("_vars", "_strides", "_pos")

    def __init__(self, variables: Iterable[Variable] = ()):
        vs = tuple(sorted(variables, key=lambda v: v.id))
        for a, b in zip(vs, vs[1:]):
            if a.id == b.id:
                raise ValueError(f"Domain has duplicate variable id {a.id}")
        strides = []
        acc = 1
        for v in vs:
            strides.append(acc)
            acc *= v.arity
        self._vars: Tuple[Variable, ...] = vs
        self._strides: Tuple[int, ...] = tuple(strides)
        self._pos = {v.id: i for i, v in enumerate(vs)}

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._vars

    @property
    def strides(self) -> Tuple[int, ...]:
        return self._strides

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(v.arity for v in self._vars)

    def num_vars(self) -> int:
        return len(self._vars)

    def var(self, i: int) -> Variable:
        """Get the i-th variable in canonical order."""
        return self._vars[i]

    def size(self) -> int:
        """Cardinality of the joint index space (product of arities)."""
        n = 1
        for v in self._vars:
            n *= v.arity
        return n

    def index_of(self, var_id: VarID) -> int:
        """Position of a variable id in canonical order."""
        if var_id not in self._pos:
            raise KeyError(f"Variable {var_id} not in domain {self}")
        return self._pos[var_id]

    def __contains__(self, item) -> bool:
        var_id = item.id if isinstance(item, Variable) else item
        return var_id in self._pos

    def __add__(self, other: "Domain") -> "Domain":
        """Union of two domains; shared ids must agree on arity."""
        merged = {v.id: v for v in self._vars}
        for v in other._vars:
            if v.id in merged and merged[v.id].arity != v.arity:
                raise ValueError(
                    f"Variable {v.id} has arity {merged[v.id].arity} in one domain "
                    f"and {v.arity} in the other"
                )
            merged[v.id] = v
        return Domain(merged.values())

    def __iter__(self) -> Iterator["Assignment"]:
        for i in range(self.size()):
            yield Assignment.from_linear_index(self, i)

    def __len__(self) -> int:
        return len(self._vars)

    def begin(self) -> "Assignment":
        """First assignment (all zeros)."""
        return Assignment(self, (0,) * len(self._vars))

    def assignment(self, linear_index: int) -> "Assignment":
        return Assignment.from_linear_index(self, linear_index)

    def __eq__(self, other) -> bool:
        return isinstance(other, Domain) and self._vars == other._vars

    def __hash__(self) -> int:
        return hash(self._vars)

    def __repr__(self) -> str:
        inner = ", ".join(f"v{v.id}:{v.arity}" for v in self._vars)
        return f"Domain({inner})"


class Assignment:
    """
    A joint value for every variable in a domain.

    Attributes:
        domain: The canonical domain
        values: Value index per variable, in canonical order
    """

    __slots__ = ("domain", "values")

    def __init__(self, domain: Domain, values: Sequence[int]):
        values = tuple(int(x) for x in values)
        if len(values) != domain.num_vars():
            raise ValueError(
                f"Assignment has {len(values)} values but domain has {domain.num_vars()} variables"
            )
        for v, x in zip(domain.variables, values):
            if not 0 <= x < v.arity:
                raise ValueError(f"Value {x} out of range for variable {v.id} with arity {v.arity}")
        self.domain = domain
        self.values: Tuple[int, ...] = values

    @classmethod
    def from_linear_index(cls, domain: Domain, index: int) -> "Assignment":
        """Decode a linear index into per-variable values."""
        if not 0 <= index < domain.size():
            raise ValueError(f"Linear index {index} out of range [0, {domain.size()})")
        values = []
        for v in domain.variables:
            values.append(index % v.arity)
            index //= v.arity
        return cls(domain, values)

    @classmethod
    def uniform_sample(cls, domain: Domain, rng: Optional[np.random.Generator] = None) -> "Assignment":
        """Draw every variable's value uniformly at random."""
        if rng is None:
            rng = np.random.default_rng()
        return cls(domain, [int(rng.integers(v.arity)) for v in domain.variables])

    @property
    def linear_index(self) -> int:
        return sum(x * s for x, s in zip(self.values, self.domain.strides))

    def asg(self, var_id: VarID) -> int:
        """Value of the given variable."""
        return self.values[self.domain.index_of(var_id)]

    def set_asg(self, var_id: VarID, value: int) -> "Assignment":
        """Return a copy with one variable's value replaced."""
        values = list(self.values)
        values[self.domain.index_of(var_id)] = value
        return Assignment(self.domain, values)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Assignment)
            and self.domain == other.domain
            and self.values == other.values
        )

    def __hash__(self) -> int:
        return hash((self.domain, self.values))

    def __repr__(self) -> str:
        inner = ", ".join(f"v{v.id}={x}" for v, x in zip(self.domain.variables, self.values))
        return f"Assignment({inner})"
