from .codec import BINARY16, BinaryFormat, Category, Fields, Rounding, classify, decode, encode
from .ops import multiply

__all__ = [
	"BINARY16",
	"BinaryFormat",
	"Category",
	"Fields",
	"Rounding",
	"classify",
	"decode",
	"encode",
	"multiply",
]
