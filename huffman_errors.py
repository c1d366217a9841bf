# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for compression and decompression failures."""


class FormatError(HuffmanError):
    """The compressed header is not in the expected tree-header format."""


class TruncatedInputError(HuffmanError):
    """The compressed stream ended before the header or body was complete."""
