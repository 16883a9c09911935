"""
pgibbs/config.py

Run-wide settings shared by the loader, the graph builder and the writers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

import numpy as np

from pgibbs.algebra.factor import NEG_MAX


@dataclass(frozen=True)
class SamplerConfig:
    """
    Attributes:
        default_arity: Arity for variable lines that omit one
        belief_init: Initial log value of every belief entry
        report_precision: Significant digits in belief reports
        seed: Seed for the initial random assignment (None = fresh entropy)
        log_level: Name of the root logging level
    """
    default_arity: int = 2
    belief_init: float = NEG_MAX
    report_precision: int = 16
    seed: Optional[int] = None
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.default_arity < 1:
            raise ValueError(f"default_arity must be >= 1, got {self.default_arity}")
        if self.report_precision < 1:
            raise ValueError(f"report_precision must be >= 1, got {self.report_precision}")

    def rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )

    @classmethod
    def from_args(cls, args: Any) -> "SamplerConfig":
        """Build from an argparse namespace; attributes left unset keep defaults."""
        cfg = cls()
        overrides = {}
        for name in ("default_arity", "report_precision", "seed", "log_level"):
            value = getattr(args, name, None)
            if value is not None:
                overrides[name] = value
        return replace(cfg, **overrides)
