import numpy as np
import pytest

from fp16mul import BINARY16, Category


@pytest.fixture(scope="session")
def all_patterns():
	return np.arange(1 << BINARY16.total_bits, dtype=np.int64)


@pytest.fixture(scope="session")
def nan_patterns(all_patterns):
	return [int(p) for p in all_patterns if BINARY16.classify(int(p)) is Category.NAN]


@pytest.fixture
def rng():
	return np.random.default_rng(456)
