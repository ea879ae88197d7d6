import logging

import numpy as np

from fp16mul import BINARY16, Rounding, multiply


VECTORS = [
	(0x4689, 0x0025, 0x00F2),
	(0x4489, 0x001D, 0x0084),
]


def main() -> None:
	logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(levelname)s: %(message)s")

	print("Format:", BINARY16.storage_info())

	for a, b, expected in VECTORS:
		result = multiply(a, b)
		truncated = multiply(a, b, rounding=Rounding.TOWARD_ZERO)
		print(f"0x{a:04x} * 0x{b:04x} = 0x{result:04x} (expected: 0x{expected:04x}, truncated: 0x{truncated:04x})")

	x = np.array([0.0, -0.0, 0.1, 1.0, -2.5, 65504.0, 1e6, np.inf, -np.inf, np.nan])
	packed = BINARY16.encode_array(x)
	print("Original:", x)
	print("Packed:", [f"0x{p:04x}" for p in packed.tolist()])
	print("Decoded:", BINARY16.decode_array(packed))
	print("Fields sample (first 5):")
	print(BINARY16.view_fields(packed)[:5])


if __name__ == "__main__":
	main()
