from __future__ import annotations

import logging

from .codec import BINARY16, BinaryFormat, Category, Fields, Rounding

log = logging.getLogger(__name__)


def _trace_operand(logger, fmt: BinaryFormat, name: str, pattern: int, fields: Fields) -> None:
	logger.debug(
		"input %s: 0x%04x = %.10f (sign=%d, exp=%d, frac=0x%03x)",
		name, pattern, fmt.decode(pattern), fields.sign, fields.exponent, fields.fraction,
	)


def multiply(
	a: int,
	b: int,
	*,
	fmt: BinaryFormat = BINARY16,
	rounding: Rounding = Rounding.NEAREST_EVEN,
	logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> int:
	"""Multiply two packed patterns and return the packed product.

	Special values are decided from the raw fields of both operands:
	any NaN gives the canonical NaN, otherwise any infinity gives an infinity,
	otherwise any zero gives a zero, with the sign of an infinity or zero
	result being the XOR of the operand signs. Infinity times zero stays an
	infinity rather than the IEEE 754 NaN.

	Everything else is decoded, multiplied as a float and encoded again with
	``rounding``. Unlike ``encode``, the default here is nearest-even, since
	the published products 0x4689 * 0x0025 = 0x00f2 and 0x4489 * 0x001d = 0x0084
	are nearest-rounded; pass ``Rounding.TOWARD_ZERO`` for truncated products
	(0x00f1 and 0x0083). Trace output goes to ``logger`` at DEBUG level and never
	changes the result.
	"""
	logger = log if logger is None else logger
	fa = fmt.split(a)
	fb = fmt.split(b)
	tracing = logger.isEnabledFor(logging.DEBUG)
	if tracing:
		_trace_operand(logger, fmt, "A", a, fa)
		_trace_operand(logger, fmt, "B", b, fb)

	sign = fa.sign ^ fb.sign
	categories = (fa.category, fb.category)

	if Category.NAN in categories:
		logger.debug("special case: NaN operand")
		return fmt.nan
	if Category.INFINITY in categories:
		logger.debug("special case: infinity operand")
		return fmt.infinity(sign)
	if Category.ZERO in categories:
		logger.debug("special case: zero operand")
		return fmt.zero(sign)

	value_a = fmt.decode(a)
	value_b = fmt.decode(b)
	product = value_a * value_b
	result = fmt.encode(product, rounding)

	if tracing:
		fr = fmt.split(result)
		logger.debug("exact multiplication: %.10f * %.10f = %.10f", value_a, value_b, product)
		logger.debug(
			"result: 0x%04x = %.10f (sign=%d, exp=%d, frac=0x%03x)",
			result, fmt.decode(result), fr.sign, fr.exponent, fr.fraction,
		)
	return result
