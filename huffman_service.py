# filename: huffman_service.py

import io
import logging
import os
from collections import namedtuple

from bit_io import BitInputStream, BitOutputStream
from huffman_core import PSEUDO_EOF, HuffmanLogic
from huffman_errors import HuffmanError

logger = logging.getLogger(__name__)

DEBUG_NONE = 0
DEBUG_LOW = 1
DEBUG_HIGH = 4
DEBUG_LEVELS = (DEBUG_NONE, DEBUG_LOW, DEBUG_HIGH)

CompressionStats = namedtuple("CompressionStats", ["bits_read", "bits_written"])


class HuffmanService:
    """
    Compresses and decompresses byte streams with a tree-header Huffman format.

    debug selects how much is logged: DEBUG_LOW reports bit counts and
    tree sizes at INFO, DEBUG_HIGH also dumps counts and codes at DEBUG.
    """

    def __init__(self, debug=DEBUG_NONE):
        if debug not in DEBUG_LEVELS:
            raise ValueError(f"debug must be one of {DEBUG_LEVELS}, got {debug!r}")
        self.debug = debug
        self.logic = HuffmanLogic()
        self.last_stats = None

    def compress_stream(self, bit_in, bit_out):
        """Two passes over bit_in: count, then encode. bit_in must support reset()."""
        counts = self.logic.count_frequencies(bit_in)
        tree = self.logic.build_tree(counts)
        codes = self.logic.generate_codes(tree)

        if self.debug >= DEBUG_HIGH:
            for symbol, freq in enumerate(counts):
                if freq:
                    logger.debug("count %3d: %d", symbol, freq)
            for symbol, code in sorted(codes.items()):
                logger.debug("code %3d: %s", symbol, _format_code(code))

        self.logic.write_header(tree, bit_out)
        header_bits = bit_out.bits_written
        bit_in.reset()
        self.logic.encode_body(bit_in, codes, bit_out)
        bit_out.flush()

        self.last_stats = CompressionStats(bit_in.bits_read, bit_out.bits_written)
        if self.debug >= DEBUG_LOW:
            logger.info("compressed %d symbols with %d leaves: header %d bits, total %d bits",
                        sum(counts), len(codes), header_bits, bit_out.bits_written)
        return self.last_stats

    def decompress_stream(self, bit_in, bit_out):
        root = self.logic.read_header(bit_in)
        if self.debug >= DEBUG_HIGH:
            for symbol, depth in self.logic.leaves(root):
                name = "EOF" if symbol == PSEUDO_EOF else f"{symbol:3d}"
                logger.debug("leaf %s at depth %d", name, depth)

        written = self.logic.decode_body(root, bit_in, bit_out)
        bit_out.flush()

        self.last_stats = CompressionStats(bit_in.bits_read, bit_out.bits_written)
        if self.debug >= DEBUG_LOW:
            logger.info("decompressed %d bits into %d bytes", bit_in.bits_read, written)
        return self.last_stats

    def compress(self, data):
        sink = io.BytesIO()
        self.compress_stream(BitInputStream(data), BitOutputStream(sink))
        return sink.getvalue()

    def decompress(self, blob):
        sink = io.BytesIO()
        self.decompress_stream(BitInputStream(blob), BitOutputStream(sink))
        return sink.getvalue()

    def compress_file(self, src, dst):
        return self._run_on_files(self.compress_stream, src, dst)

    def decompress_file(self, src, dst):
        return self._run_on_files(self.decompress_stream, src, dst)

    def _run_on_files(self, operation, src, dst):
        # opening dst for writing would empty src before the first read
        if os.path.exists(dst) and os.path.samefile(src, dst):
            raise HuffmanError(f"input and output are the same file: {dst}")

        with BitInputStream(open(src, "rb")) as bit_in:
            out_file = open(dst, "wb")
            # a failed run must not leave a plausible-looking output file behind
            try:
                with BitOutputStream(out_file) as bit_out:
                    return operation(bit_in, bit_out)
            except BaseException:
                os.remove(dst)
                raise


def _format_code(code):
    if code.length == 0:
        return "(empty)"
    return format(code.bits, f"0{code.length}b")
