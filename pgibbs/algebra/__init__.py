"""
Algebra module: variables, domains, assignments and log-space factors.
"""

from pgibbs.algebra.domain import Variable, Domain, Assignment
from pgibbs.algebra.factor import TableFactor, NEG_MAX

__all__ = [
    "Variable",
    "Domain",
    "Assignment",
    "TableFactor",
    "NEG_MAX",
]
