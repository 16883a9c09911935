"""
pgibbs/algebra/factor.py

Log-space potential tables over a canonical domain.

A TableFactor stores one natural-log value per linear index of its domain.
Products are sums, marginal normalization is log-sum-exp.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
from scipy.special import logsumexp

from pgibbs.algebra.domain import Assignment, Domain

# Finite stand-in for log(0); keeps uniform initialization free of NaN
NEG_MAX = -np.finfo(np.float64).max

Index = Union[int, Assignment]


class TableFactor:
    """
    A dense log-potential table.

    Attributes:
        domain: Canonical domain of the factor
        logp: Flat float64 array of length domain.size()
    """

    __slots__ = ("domain", "logp")

    def __init__(self, domain: Domain, logp: Optional[np.ndarray] = None):
        self.domain = domain
        if logp is None:
            self.logp = np.zeros(domain.size(), dtype=np.float64)
        else:
            arr = np.asarray(logp, dtype=np.float64).reshape(-1)
            if arr.size != domain.size():
                raise ValueError(
                    f"Factor over {domain} needs {domain.size()} values, got {arr.size}"
                )
            self.logp = arr.copy()

    @classmethod
    def constant(cls, domain: Domain, value: float) -> "TableFactor":
        f = cls(domain)
        f.uniform(value)
        return f

    def num_vars(self) -> int:
        return self.domain.num_vars()

    def size(self) -> int:
        return self.logp.size

    def args(self) -> Domain:
        return self.domain

    def uniform(self, value: float = 0.0) -> None:
        """Set every entry to the same log value."""
        self.logp.fill(value)

    def _index(self, key: Index) -> int:
        if isinstance(key, Assignment):
            if key.domain != self.domain:
                raise ValueError(f"Assignment over {key.domain} does not match factor over {self.domain}")
            return key.linear_index
        index = int(key)
        if not 0 <= index < self.logp.size:
            raise ValueError(f"Linear index {index} out of range [0, {self.logp.size})")
        return index

    def __getitem__(self, key: Index) -> float:
        return float(self.logp[self._index(key)])

    def __setitem__(self, key: Index, value: float) -> None:
        self.logp[self._index(key)] = value

    def normalize(self) -> None:
        """Shift the table so that exp(logp) sums to one."""
        if self.logp.size == 0:
            return
        m = self.logp.max()
        if np.isneginf(m):
            raise ValueError(f"Cannot normalize factor over {self.domain}: zero total mass")
        # Max entry becomes 0 so sentinel-filled tables normalize to uniform
        self.logp -= m
        self.logp -= logsumexp(self.logp)

    def normalized(self) -> "TableFactor":
        f = self.copy()
        f.normalize()
        return f

    def marginal_probs(self) -> np.ndarray:
        """Probabilities (not logs) of the normalized table."""
        return np.exp(self.normalized().logp)

    def copy(self) -> "TableFactor":
        return TableFactor(self.domain, self.logp)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, TableFactor)
            and self.domain == other.domain
            and np.array_equal(self.logp, other.logp, equal_nan=True)
        )

    def __repr__(self) -> str:
        return f"TableFactor({self.domain}, size={self.size()})"
