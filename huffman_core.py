# filename: huffman_core.py

import heapq
import itertools
from collections import Counter

from loguru import logger

# Silent until the application opts in through huffman_config.configure_logging
logger.disable(__name__)


class HuffmanError(Exception):
    """Base class for codec errors."""


class SymbolNotInCodeTableError(HuffmanError, KeyError):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"symbol {self.symbol!r} has no code in the code table"


class InvalidBitError(HuffmanError, ValueError):
    pass


class HuffmanNode:
    def __init__(self, symbol, freq, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode({self.symbol!r}, {self.freq})"
        return f"HuffmanNode(<internal>, {self.freq})"


def analyze(data):
    """Count occurrences of every distinct symbol in ``data``.

    Keys keep first-occurrence order, which the tree builder relies on for
    its tie-break.
    """
    return dict(Counter(data))


def merge_frequencies(tables):
    """Merge per-shard frequency tables in the order they are given."""
    merged = Counter()
    for table in tables:
        merged.update(table)
    return dict(merged)


def build_tree(freqs):
    """Build a Huffman tree from a frequency table.

    Returns ``None`` for an empty table and the lone leaf when there is a
    single symbol. Equal frequencies are popped in creation order: leaves in
    table order, then merged nodes in the order they were made.
    """
    if not freqs:
        return None

    sequence = itertools.count()
    # Priority queue entries are (freq, creation order, node)
    priority_queue = [
        (freq, next(sequence), HuffmanNode(symbol, freq))
        for symbol, freq in freqs.items()
    ]
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        _, _, left = heapq.heappop(priority_queue)
        _, _, right = heapq.heappop(priority_queue)
        merged = HuffmanNode(None, left.freq + right.freq, left, right)
        heapq.heappush(priority_queue, (merged.freq, next(sequence), merged))

    root = priority_queue[0][2]
    logger.debug("built Huffman tree: {} symbols, root frequency {}", len(freqs), root.freq)
    return root


def generate_codes(node):
    """Map each leaf symbol to the '0'/'1' path leading to it.

    A tree that is a single leaf gets the one-bit code ``"0"`` so that
    repeated occurrences stay countable.
    """
    codes = {}
    if node is None:
        return codes
    if node.is_leaf:
        codes[node.symbol] = "0"
        return codes

    stack = [(node, "")]
    while stack:
        current, prefix = stack.pop()
        if current.is_leaf:
            codes[current.symbol] = prefix
            continue
        # Right first so the left subtree is visited first
        stack.append((current.right, prefix + "1"))
        stack.append((current.left, prefix + "0"))
    return codes


def encode(data, codes, strict=True):
    """Concatenate the code of every symbol in ``data``.

    Unknown symbols raise :class:`SymbolNotInCodeTableError` unless
    ``strict`` is false, in which case they are dropped with a warning.
    """
    parts = []
    for symbol in data:
        code = codes.get(symbol)
        if code is None:
            if strict:
                raise SymbolNotInCodeTableError(symbol)
            logger.warning("skipping symbol {!r}: not in code table", symbol)
            continue
        parts.append(code)
    return "".join(parts)


def decode(bits, tree):
    """Walk ``tree`` bit by bit and return the decoded symbols as a list.

    Decoding stops at the first bit that leads off the tree and returns what
    was decoded up to that point. Bits left over after the last complete code
    are ignored.
    """
    decoded = []
    if tree is None:
        return decoded

    current = tree
    for position, bit in enumerate(bits):
        if bit not in ("0", "1"):
            raise InvalidBitError(f"invalid bit {bit!r} at position {position}")

        if tree.is_leaf:
            # A lone leaf is reached by its one-bit code "0"
            current = tree if bit == "0" else None
        elif bit == "0":
            current = current.left
        else:
            current = current.right

        if current is None:
            logger.warning(
                "bit {} at position {} leads off the tree; stopping after {} symbols",
                bit, position, len(decoded),
            )
            break
        if current.is_leaf:
            decoded.append(current.symbol)
            current = tree
    return decoded


class HuffmanLogic:
    def __init__(self, strict=True):
        self.strict = strict

    def analyze(self, data):
        return analyze(data)

    def build_tree(self, freqs):
        return build_tree(freqs)

    def generate_codes(self, node):
        return generate_codes(node)

    def encode(self, data, codes):
        return encode(data, codes, strict=self.strict)

    def decode(self, bits, tree):
        return decode(bits, tree)
