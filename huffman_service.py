# filename: huffman_service.py

from dataclasses import dataclass

from loguru import logger

from huffman_config import HuffmanConfig
from huffman_core import HuffmanError, HuffmanLogic

logger.disable(__name__)


class CorruptStreamError(HuffmanError, ValueError):
    pass


def pack_bits(bits):
    """Pack a '0'/'1' string MSB-first, prefixed by the number of pad bits."""
    padding = -len(bits) % 8
    padded = bits + "0" * padding
    body = int(padded, 2).to_bytes(len(padded) // 8, "big") if padded else b""
    return bytes([padding]) + body


def unpack_bits(payload):
    if not payload:
        return ""
    padding = payload[0]
    if padding > 7:
        raise CorruptStreamError(f"invalid padding count {padding}")
    body = payload[1:]
    if padding and not body:
        raise CorruptStreamError("padding declared for an empty body")
    bits = "".join(format(byte, "08b") for byte in body)
    return bits[:len(bits) - padding]


@dataclass(frozen=True)
class CompressionStats:
    symbols: int
    distinct_symbols: int
    original_bits: int
    compressed_bits: int
    lossless: bool

    @property
    def ratio(self):
        if not self.original_bits:
            return 0.0
        return self.compressed_bits / self.original_bits

    def as_dict(self):
        return {
            "symbols": self.symbols,
            "distinct_symbols": self.distinct_symbols,
            "original_bits": self.original_bits,
            "compressed_bits": self.compressed_bits,
            "ratio": round(self.ratio, 6),
            "lossless": self.lossless,
        }


class HuffmanService:
    """Holds the tree and code table built for one input.

    The tree never leaves the process: ``decompress`` only accepts payloads
    produced by the session that is currently built.
    """

    def __init__(self, config=None):
        self.config = config or HuffmanConfig()
        self.logic = HuffmanLogic(strict=self.config.strict_encoding)
        self.freqs = {}
        self.tree = None
        self.codes = {}
        self.length = 0
        self._kind = bytes

    def build(self, data):
        self.freqs = self.logic.analyze(data)
        self.tree = self.logic.build_tree(self.freqs)
        self.codes = self.logic.generate_codes(self.tree)
        self.length = len(data)
        self._kind = _kind_of(data)
        logger.debug("session built: {} symbols, {} distinct", self.length, len(self.freqs))
        return self.codes

    def encode_bits(self, data):
        return self.logic.encode(data, self.codes)

    def decode_bits(self, bits):
        return _restore(self.logic.decode(bits, self.tree), self._kind)

    def compress(self, data):
        self.build(data)
        if not data:
            return b""
        return pack_bits(self.encode_bits(data))

    def decompress(self, payload):
        if not payload:
            if self.length:
                raise CorruptStreamError(f"decoded 0 of {self.length} symbols from 0 bits")
            return _restore([], self._kind)
        if self.tree is None:
            raise CorruptStreamError("no session has been built to decode with")

        bits = unpack_bits(payload)
        symbols = self.logic.decode(bits, self.tree)
        if len(symbols) != self.length or len(self.logic.encode(symbols, self.codes)) != len(bits):
            raise CorruptStreamError(
                f"decoded {len(symbols)} of {self.length} symbols from {len(bits)} bits"
            )
        return _restore(symbols, self._kind)

    def stats(self, data):
        """Compress ``data`` and report sizes, counting 8 bits per input symbol."""
        self.build(data)
        payload_bits = self.encode_bits(data)
        restored = self.decode_bits(payload_bits)
        return CompressionStats(
            symbols=len(data),
            distinct_symbols=len(self.freqs),
            original_bits=8 * len(data),
            compressed_bits=len(payload_bits),
            lossless=restored == _restore(list(data), self._kind),
        )


def _kind_of(data):
    if isinstance(data, (bytes, bytearray)):
        return bytes
    if isinstance(data, str):
        return str
    return list


def _restore(symbols, kind):
    if kind is bytes:
        return bytes(symbols)
    if kind is str:
        return "".join(symbols)
    return list(symbols)
