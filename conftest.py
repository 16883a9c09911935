"""
Shared pytest fixtures.
"""

import numpy as np
import pytest

from pgibbs.model.loader import parse_alchemy

CHAIN_MODEL = """variables:
A\t2
B\t3
C
factors:
A/B// 0.0 -1.0 -2.0 -0.5 -0.1 -3.0
C/B// 0 0 0 0 0 0 /// 1.5
A// -0.7 -0.2
"""


@pytest.fixture
def chain_text():
    return CHAIN_MODEL


@pytest.fixture
def chain_model():
    return parse_alchemy(CHAIN_MODEL)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
