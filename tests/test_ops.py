import logging
from unittest import mock

import pytest

from fp16mul import BINARY16, BinaryFormat, Category, Rounding, classify, multiply

ZERO_AND_INFINITY = [0x0000, 0x8000, 0x7C00, 0xFC00]
SPECIALS = ZERO_AND_INFINITY + [0x0001, 0x8001, 0x03FF, 0x0400, 0x3C00, 0xBC00, 0x7BFF, 0xFBFF, 0x7C01, 0xFFFF]


def test_published_vectors():
	test_cases = [
		(0x4689, 0x0025, 0x00F2),
		(0x4489, 0x001D, 0x0084),
	]

	for a, b, expected in test_cases:
		result = multiply(a, b)
		assert result == expected, f"0x{a:04X} * 0x{b:04X} = 0x{result:04X}, expected 0x{expected:04X}"


def test_published_vectors_truncated():
	# Truncating the exact products 241.80 and 131.52 (in units of the smallest subnormal)
	assert multiply(0x4689, 0x0025, rounding=Rounding.TOWARD_ZERO) == 0x00F1
	assert multiply(0x4489, 0x001D, rounding=Rounding.TOWARD_ZERO) == 0x0083


def test_generic_products():
	test_cases = [
		(0x3C00, 0x3C00, 0x3C00),
		(0x4000, 0x4200, 0x4600),
		(0xC000, 0x3800, 0xBC00),
		(0xC000, 0xC000, 0x4400),
		(0x7BFF, 0x3C00, 0x7BFF),
		(0x0400, 0x3800, 0x0200),
		(0x0001, 0x3A00, 0x0001),
		(0x0001, 0x3800, 0x0000),
		(0x0001, 0x0001, 0x0000),
		(0x8001, 0x0001, 0x8000),
	]

	for a, b, expected in test_cases:
		result = multiply(a, b)
		assert result == expected, f"0x{a:04X} * 0x{b:04X} = 0x{result:04X}, expected 0x{expected:04X}"


def test_overflow_gives_infinity():
	for rounding in Rounding:
		assert multiply(0x7BFF, 0x4000, rounding=rounding) == 0x7C00
		assert multiply(0xFBFF, 0x4000, rounding=rounding) == 0xFC00


def test_zero_and_infinity_signs():
	for a in ZERO_AND_INFINITY:
		for b in ZERO_AND_INFINITY:
			result = multiply(a, b)
			expected_sign = (a >> 15) ^ (b >> 15)
			assert result >> 15 == expected_sign, f"0x{a:04X} * 0x{b:04X} = 0x{result:04X}"
			assert classify(result) in (Category.ZERO, Category.INFINITY)


def test_zero_times_finite_keeps_sign():
	assert multiply(0x8000, 0x3C00) == 0x8000
	assert multiply(0x0000, 0xBC00) == 0x8000
	assert multiply(0x8000, 0x8001) == 0x0000
	assert multiply(0x7C00, 0xC000) == 0xFC00


def test_nan_absorbs(nan_patterns):
	others = SPECIALS + [0x4689, 0x0025, 0xC400]
	for a in nan_patterns:
		for b in others:
			assert multiply(a, b) == 0x7C01, f"0x{a:04X} * 0x{b:04X}"
			assert multiply(b, a) == 0x7C01, f"0x{b:04X} * 0x{a:04X}"


def test_commutative(rng):
	pairs = [(a, b) for a in SPECIALS for b in SPECIALS]
	pairs += [tuple(p) for p in rng.integers(0, 1 << 16, size=(5000, 2)).tolist()]

	for a, b in pairs:
		assert multiply(a, b) == multiply(b, a), f"0x{a:04X} * 0x{b:04X} is not commutative"


def test_infinity_times_zero_follows_branch_order():
	assert multiply(0x0000, 0x7C00) == 0x7C00
	assert multiply(0x7C00, 0x0000) == 0x7C00
	assert multiply(0x8000, 0x7C00) == 0xFC00


@pytest.mark.xfail(strict=True, reason="infinity times zero returns infinity, IEEE 754 gives NaN")
def test_infinity_times_zero_ieee754():
	assert classify(multiply(0x0000, 0x7C00)) is Category.NAN


def test_invalid_operands():
	with pytest.raises(ValueError):
		multiply(0x10000, 0x3C00)
	with pytest.raises(TypeError):
		multiply(1.0, 0x3C00)


def test_other_format():
	bf16 = BinaryFormat(exponent_bits=8, fraction_bits=7)
	assert multiply(0x4000, 0x4040, fmt=bf16) == 0x40C0
	assert multiply(0x7F80, 0x0000, fmt=bf16) == 0x7F80
	assert multiply(0x7FC0, 0x3F80, fmt=bf16) == bf16.nan


def test_trace_goes_to_injected_logger(caplog):
	logger = logging.getLogger("tests.observer")
	with caplog.at_level(logging.DEBUG, logger="tests.observer"):
		result = multiply(0x4689, 0x0025, logger=logger)

	assert result == 0x00F2
	messages = [r.getMessage() for r in caplog.records if r.name == "tests.observer"]
	assert any("input A: 0x4689" in m for m in messages)
	assert any("input B: 0x0025" in m for m in messages)
	assert any("result: 0x00f2" in m for m in messages)


def test_trace_special_case_on_module_logger(caplog):
	with caplog.at_level(logging.DEBUG, logger="fp16mul.ops"):
		multiply(0x8000, 0x3C00)
	assert "special case: zero operand" in caplog.text


def test_trace_does_not_change_results(rng):
	logger = mock.Mock(spec=logging.Logger)
	logger.isEnabledFor.return_value = True
	pairs = [tuple(p) for p in rng.integers(0, 1 << 16, size=(500, 2)).tolist()]

	for a, b in pairs:
		assert multiply(a, b, logger=logger) == multiply(a, b)
	assert logger.debug.called


def test_quiet_logger_skips_operand_trace():
	logger = mock.Mock(spec=logging.Logger)
	logger.isEnabledFor.return_value = False
	assert multiply(0x4000, 0x4200, logger=logger) == 0x4600
	logger.debug.assert_not_called()
