"""
Model module: factorized distributions and the text model loader.
"""

from pgibbs.model.factorized import FactorizedModel
from pgibbs.model.loader import ModelFormatError, parse_alchemy, load_alchemy

__all__ = [
    "FactorizedModel",
    "ModelFormatError",
    "parse_alchemy",
    "load_alchemy",
]
