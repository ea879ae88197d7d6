from __future__ import annotations

import enum
import math
import operator
from dataclasses import dataclass
from typing import Dict

import numpy as np


def _smallest_uint_dtype_for_bits(total_bits: int) -> np.dtype:
	if total_bits <= 8:
		return np.uint8
	elif total_bits <= 16:
		return np.uint16
	elif total_bits <= 32:
		return np.uint32
	else:
		return np.uint64


class Category(enum.Enum):
	"""Value class of a packed pattern, read straight from its raw fields."""

	ZERO = "zero"
	SUBNORMAL = "subnormal"
	NORMAL = "normal"
	INFINITY = "infinity"
	NAN = "nan"


class Rounding(enum.Enum):
	TOWARD_ZERO = "toward_zero"
	NEAREST_EVEN = "nearest_even"


@dataclass(frozen=True)
class Fields:
	sign: int
	exponent: int
	fraction: int
	category: Category


@dataclass(frozen=True)
class BinaryFormat:
	"""Sign-magnitude binary floating-point layout packed into an unsigned integer.

	Layout is [sign | exponent | fraction] from most-significant to least-significant bits.

	- exponent_bits: 2..11
	- fraction_bits: 1..52
	- exponent_bias: if None, uses (2^(exponent_bits-1) - 1)

	Values are carried through a Python float (double precision), so the layout
	must not be wider than a double in either field.
	"""

	exponent_bits: int
	fraction_bits: int
	exponent_bias: int | None = None

	def __post_init__(self):
		if not 2 <= self.exponent_bits <= 11:
			raise ValueError("exponent_bits must be between 2 and 11")
		if not 1 <= self.fraction_bits <= 52:
			raise ValueError("fraction_bits must be between 1 and 52")
		object.__setattr__(self, "total_bits", 1 + self.exponent_bits + self.fraction_bits)
		bias = self.exponent_bias
		if bias is None:
			bias = (1 << (self.exponent_bits - 1)) - 1
		# Largest normal and smallest subnormal must both be exact doubles
		if (1 << self.exponent_bits) - 2 - bias > 1023:
			raise ValueError(f"exponent_bias {bias} puts the largest normal above the double range")
		if 1 - bias - self.fraction_bits < -1074:
			raise ValueError(f"exponent_bias {bias} puts the smallest subnormal below the double range")
		object.__setattr__(self, "exponent_bias", bias)
		object.__setattr__(self, "storage_dtype", _smallest_uint_dtype_for_bits(self.total_bits))
		# Masks and shifts
		fraction_mask = (1 << self.fraction_bits) - 1
		exponent_mask = (1 << self.exponent_bits) - 1
		sign_shift = self.fraction_bits + self.exponent_bits
		object.__setattr__(self, "_fraction_mask", fraction_mask)
		object.__setattr__(self, "_exponent_mask", exponent_mask)
		object.__setattr__(self, "_sign_shift", sign_shift)
		object.__setattr__(self, "_exponent_shift", self.fraction_bits)
		object.__setattr__(self, "_pattern_mask", (1 << self.total_bits) - 1)
		object.__setattr__(self, "_exp_all_ones", exponent_mask)
		object.__setattr__(self, "_fraction_scale", float(1 << self.fraction_bits))
		# Unbiased exponent of the smallest normal; subnormals share it.
		object.__setattr__(self, "_min_exponent", 1 - bias)

	@property
	def dtype(self) -> np.dtype:
		return self.storage_dtype

	@property
	def nan(self) -> int:
		"""Canonical NaN: all-ones exponent, fraction 1, positive sign."""
		return self.join(0, self._exp_all_ones, 1)

	def infinity(self, sign: int = 0) -> int:
		return self.join(sign, self._exp_all_ones, 0)

	def zero(self, sign: int = 0) -> int:
		return self.join(sign, 0, 0)

	def _check_pattern(self, pattern) -> int:
		pattern = operator.index(pattern)
		if not 0 <= pattern <= self._pattern_mask:
			raise ValueError(f"pattern 0x{pattern:x} does not fit in {self.total_bits} bits")
		return pattern

	def split(self, pattern) -> Fields:
		"""Split a packed pattern into its fields and classify it."""
		pattern = self._check_pattern(pattern)
		sign = pattern >> self._sign_shift
		exponent = (pattern >> self._exponent_shift) & self._exponent_mask
		fraction = pattern & self._fraction_mask

		if exponent == 0:
			category = Category.SUBNORMAL if fraction else Category.ZERO
		elif exponent == self._exp_all_ones:
			category = Category.NAN if fraction else Category.INFINITY
		else:
			category = Category.NORMAL
		return Fields(sign, exponent, fraction, category)

	def join(self, sign: int, exponent: int, fraction: int) -> int:
		if sign not in (0, 1):
			raise ValueError("sign must be 0 or 1")
		if not 0 <= exponent <= self._exponent_mask:
			raise ValueError(f"exponent {exponent} out of range for {self.exponent_bits} bits")
		if not 0 <= fraction <= self._fraction_mask:
			raise ValueError(f"fraction {fraction} out of range for {self.fraction_bits} bits")
		return (sign << self._sign_shift) | (exponent << self._exponent_shift) | fraction

	def classify(self, pattern) -> Category:
		return self.split(pattern).category

	def decode(self, pattern) -> float:
		"""Decode one packed pattern to a float.

		Every pattern decodes; NaN-class patterns all decode to a plain NaN.
		"""
		fields = self.split(pattern)
		sign = -1.0 if fields.sign else 1.0
		category = fields.category

		if category is Category.ZERO:
			return math.copysign(0.0, sign)
		elif category is Category.SUBNORMAL:
			return sign * math.ldexp(fields.fraction / self._fraction_scale, self._min_exponent)
		elif category is Category.NORMAL:
			return sign * math.ldexp(1.0 + fields.fraction / self._fraction_scale, fields.exponent - self.exponent_bias)
		elif category is Category.INFINITY:
			return sign * math.inf
		return math.nan

	def encode(self, value: float, rounding: Rounding = Rounding.TOWARD_ZERO) -> int:
		"""Encode a float to the packed pattern.

		By default the fraction is truncated toward zero. With
		``Rounding.NEAREST_EVEN`` it is rounded to nearest, ties to even, and a
		carry out of the fraction moves into the exponent field.
		Magnitudes past the largest binade encode as a signed infinity.
		"""
		value = float(value)
		if math.isnan(value):
			return self.nan
		sign = 1 if math.copysign(1.0, value) < 0 else 0
		if math.isinf(value):
			return self.infinity(sign)
		if value == 0.0:
			return self.zero(sign)

		magnitude = abs(value)
		# frexp gives floor(log2(magnitude)) + 1 exactly
		unbiased = math.frexp(magnitude)[1] - 1
		if unbiased < self._min_exponent:
			exponent = 0
			scaled = math.ldexp(magnitude, self.fraction_bits - self._min_exponent)
		else:
			exponent = unbiased + self.exponent_bias
			if exponent >= self._exp_all_ones:
				return self.infinity(sign)
			scaled = math.ldexp(magnitude, self.fraction_bits - unbiased)

		# scaled < 2^fraction_bits for subnormals, so the fraction always fits
		fraction = math.floor(scaled)
		remainder = scaled - fraction
		if exponent:
			fraction -= 1 << self.fraction_bits

		bits = (exponent << self._exponent_shift) | fraction
		if rounding is Rounding.NEAREST_EVEN and (remainder > 0.5 or (remainder == 0.5 and fraction & 1)):
			bits += 1
		return (sign << self._sign_shift) | bits

	def _as_packed(self, packed) -> np.ndarray:
		p = np.asarray(packed)
		if p.dtype.kind not in "ui":
			raise TypeError(f"packed patterns must be integers, got {p.dtype}")
		if p.dtype.kind == "i" and np.any(p < 0):
			raise ValueError(f"packed patterns must fit in {self.total_bits} bits")
		# 64-bit layouts put the sign in bit 63, so stay unsigned until the fields are split
		p = p.astype(np.uint64)
		if np.any(p > np.uint64(self._pattern_mask)):
			raise ValueError(f"packed patterns must fit in {self.total_bits} bits")
		return p

	def _split_array(self, packed):
		p = self._as_packed(packed)
		sign = (p >> np.uint64(self._sign_shift)) & np.uint64(0x1)
		exponent = (p >> np.uint64(self._exponent_shift)) & np.uint64(self._exponent_mask)
		fraction = p & np.uint64(self._fraction_mask)
		return sign.astype(np.int64), exponent.astype(np.int64), fraction.astype(np.int64)

	def view_fields(self, packed: np.ndarray) -> np.ndarray:
		"""Return a structured view exposing sign/exponent/fraction as integer fields."""
		sign, exponent, fraction = self._split_array(packed)
		dtype = np.dtype([
			("sign", self.storage_dtype),
			("exponent", self.storage_dtype),
			("fraction", self.storage_dtype),
		])
		out = np.empty(sign.shape, dtype=dtype)
		out["sign"] = sign
		out["exponent"] = exponent
		out["fraction"] = fraction
		return out

	def decode_array(self, packed: np.ndarray | int) -> np.ndarray:
		"""Vectorized decode from packed patterns to float64, matching ``decode``."""
		sign, exp_field, frac_field = self._split_array(packed)
		frac = frac_field / self._fraction_scale

		normal_mask = (exp_field != 0) & (exp_field != self._exp_all_ones)
		special_mask = exp_field == self._exp_all_ones

		values = np.where(
			normal_mask,
			np.ldexp(1.0 + frac, np.where(normal_mask, exp_field - self.exponent_bias, 0).astype(np.int32)),
			np.ldexp(frac, self._min_exponent),
		)
		values = np.where(special_mask, np.where(frac == 0, np.inf, np.nan), values)
		return np.where(sign == 1, -values, values)

	def encode_array(self, values: np.ndarray | float, rounding: Rounding = Rounding.TOWARD_ZERO) -> np.ndarray:
		"""Vectorized encode from floats to the storage dtype, matching ``encode``."""
		floats = np.asarray(values, dtype=np.float64)
		nan_mask = np.isnan(floats)
		inf_mask = np.isinf(floats)
		zero_mask = floats == 0.0
		finite_mask = ~(nan_mask | inf_mask | zero_mask)

		sign = np.signbit(floats).astype(np.int64)
		# Placeholder magnitude of 1.0 keeps frexp/ldexp quiet on the special lanes
		magnitude = np.where(finite_mask, np.abs(floats), 1.0)

		unbiased = np.frexp(magnitude)[1].astype(np.int64) - 1
		sub_mask = unbiased < self._min_exponent
		exponent = np.where(sub_mask, 0, unbiased + self.exponent_bias)
		shift = np.where(sub_mask, self.fraction_bits - self._min_exponent, self.fraction_bits - unbiased)
		scaled = np.ldexp(magnitude, shift.astype(np.int32))

		truncated = np.floor(scaled)
		remainder = scaled - truncated
		fraction = truncated.astype(np.int64)
		fraction = np.where(sub_mask, fraction, fraction - (1 << self.fraction_bits))

		bits = (exponent << self._exponent_shift) | fraction
		if rounding is Rounding.NEAREST_EVEN:
			round_up = (remainder > 0.5) | ((remainder == 0.5) & ((fraction & 1) == 1))
			bits = bits + round_up.astype(np.int64)

		inf_bits = self._exp_all_ones << self._exponent_shift
		overflow_mask = finite_mask & (exponent >= self._exp_all_ones)
		bits = np.where(overflow_mask | inf_mask, inf_bits, bits)
		bits = np.where(zero_mask, 0, bits)

		packed = (sign.astype(np.uint64) << np.uint64(self._sign_shift)) | bits.astype(np.uint64)
		packed = np.where(nan_mask, np.uint64(self.nan), packed)
		return packed.astype(self.storage_dtype)

	def storage_info(self) -> Dict[str, int | np.dtype]:
		return {
			"total_bits": self.total_bits,
			"dtype": self.storage_dtype,
			"exponent_bits": self.exponent_bits,
			"fraction_bits": self.fraction_bits,
			"exponent_bias": self.exponent_bias,
		}


BINARY16 = BinaryFormat(exponent_bits=5, fraction_bits=10)


def classify(pattern) -> Category:
	return BINARY16.classify(pattern)


def decode(pattern) -> float:
	return BINARY16.decode(pattern)


def encode(value: float, rounding: Rounding = Rounding.TOWARD_ZERO) -> int:
	return BINARY16.encode(value, rounding)
