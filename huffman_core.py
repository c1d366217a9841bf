# filename: huffman_core.py

import heapq
from collections import namedtuple

from bit_io import EOF
from huffman_errors import FormatError, HuffmanError, TruncatedInputError

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE
HUFF_NUMBER = 0xface8200   # legacy header that stored counts, not a tree
HUFF_TREE = HUFF_NUMBER | 1

# A leaf at this depth would need more than ALPH_SIZE + 1 leaves
MAX_DEPTH = ALPH_SIZE

# Path from the root to a leaf: length bits, left=0 / right=1, MSB first
Code = namedtuple("Code", ["length", "bits"])


class HuffmanNode:
    def __init__(self, symbol, freq, left=None, right=None, order=0):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right
        # creation sequence number, breaks ties between equal weights
        self.order = order

    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return (self.freq, self.order) < (other.freq, other.order)

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode(symbol={self.symbol}, freq={self.freq})"
        return f"HuffmanNode(freq={self.freq})"


class HuffmanLogic:
    def count_frequencies(self, bit_in):
        """Count every 8-bit word left in bit_in. Consumes the stream."""
        counts = [0] * ALPH_SIZE
        while True:
            word = bit_in.read_bits(BITS_PER_WORD)
            if word is EOF:
                break
            counts[word] += 1
        return counts

    def build_tree(self, counts):
        """
        Build the Huffman tree for a 256-slot frequency table.

        PSEUDO_EOF always gets a leaf of weight 1, so the result is never
        empty. Equal weights leave the queue in creation order: leaves in
        ascending symbol order first, then internal nodes as they are made.
        """
        order = 0
        priority_queue = []
        for symbol, freq in enumerate(counts):
            if freq:
                priority_queue.append(HuffmanNode(symbol, freq, order=order))
                order += 1
        priority_queue.append(HuffmanNode(PSEUDO_EOF, 1, order=order))
        order += 1
        heapq.heapify(priority_queue)

        # Iteratively merge the two lightest nodes until one is left
        while len(priority_queue) > 1:
            left = heapq.heappop(priority_queue)
            right = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left.freq + right.freq, left, right, order)
            order += 1
            heapq.heappush(priority_queue, merged)

        return priority_queue[0]

    def generate_codes(self, node, length=0, bits=0, codes=None):
        """Map every leaf symbol under node to its Code."""
        if codes is None:
            codes = {}
        if node.is_leaf():
            # a lone root leaf gets the empty code
            codes[node.symbol] = Code(length, bits)
            return codes
        self.generate_codes(node.left, length + 1, bits << 1, codes)
        self.generate_codes(node.right, length + 1, (bits << 1) | 1, codes)
        return codes

    def write_header(self, root, bit_out):
        bit_out.write_bits(BITS_PER_INT, HUFF_TREE)
        self.write_tree(root, bit_out)

    def write_tree(self, node, bit_out):
        """Preorder: 0 then both subtrees for internal nodes, 1 + symbol for leaves."""
        if node.is_leaf():
            bit_out.write_bits(1, 1)
            bit_out.write_bits(BITS_PER_WORD + 1, node.symbol)
            return
        bit_out.write_bits(1, 0)
        self.write_tree(node.left, bit_out)
        self.write_tree(node.right, bit_out)

    def read_header(self, bit_in):
        """Check the magic number and rebuild the tree that follows it."""
        magic = bit_in.read_bits(BITS_PER_INT)
        if magic is EOF:
            raise TruncatedInputError("input ends before the header magic number")
        if magic == HUFF_NUMBER:
            raise FormatError("legacy count-based header is not supported")
        if magic != HUFF_TREE:
            raise FormatError(f"illegal header starts with {magic:#010x}")

        root = self.read_tree(bit_in)
        eof_leaves = sum(1 for symbol, _ in self.leaves(root) if symbol == PSEUDO_EOF)
        if eof_leaves != 1:
            raise FormatError(f"header tree has {eof_leaves} end-of-stream leaves")
        return root

    def read_tree(self, bit_in, depth=0):
        if depth > MAX_DEPTH:
            raise FormatError(f"header tree is deeper than {MAX_DEPTH} levels")
        bit = bit_in.read_bits(1)
        if bit is EOF:
            raise TruncatedInputError("input ends inside the tree header")
        if bit == 0:
            left = self.read_tree(bit_in, depth + 1)
            right = self.read_tree(bit_in, depth + 1)
            return HuffmanNode(None, 0, left, right)

        symbol = bit_in.read_bits(BITS_PER_WORD + 1)
        if symbol is EOF:
            raise TruncatedInputError("input ends inside a tree header leaf")
        if symbol > PSEUDO_EOF:
            raise FormatError(f"header leaf has out-of-range symbol {symbol}")
        return HuffmanNode(symbol, 0)

    def leaves(self, node, depth=0):
        """Yield (symbol, depth) for every leaf, left to right."""
        if node.is_leaf():
            yield node.symbol, depth
            return
        yield from self.leaves(node.left, depth + 1)
        yield from self.leaves(node.right, depth + 1)

    def encode_body(self, bit_in, codes, bit_out):
        """Write the code of every word in bit_in, then the PSEUDO_EOF code."""
        while True:
            word = bit_in.read_bits(BITS_PER_WORD)
            if word is EOF:
                break
            code = codes.get(word)
            if code is None:
                raise HuffmanError(f"no code for byte {word}; input changed between passes?")
            bit_out.write_bits(code.length, code.bits)

        eof = codes[PSEUDO_EOF]
        bit_out.write_bits(eof.length, eof.bits)

    def decode_body(self, root, bit_in, bit_out):
        """Walk the tree bit by bit until the PSEUDO_EOF leaf. Returns bytes written."""
        if root.is_leaf():
            # header-only stream from empty input
            if root.symbol == PSEUDO_EOF:
                return 0
            raise FormatError("single-leaf tree without an end-of-stream leaf")

        written = 0
        current = root
        while True:
            bit = bit_in.read_bits(1)
            if bit is EOF:
                raise TruncatedInputError("bad input, no PSEUDO_EOF before end of stream")
            current = current.right if bit else current.left
            if current.is_leaf():
                if current.symbol == PSEUDO_EOF:
                    return written
                bit_out.write_bits(BITS_PER_WORD, current.symbol)
                written += 1
                current = root
