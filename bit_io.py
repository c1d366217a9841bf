# filename: bit_io.py

"""
Bit-level streams over binary file objects.

Values are packed most-significant bit first. The writer keeps the
pending bits in an integer buffer and emits a byte whenever eight of
them are ready; the reader does the reverse.
"""

import io

# Returned by BitInputStream.read_bits when the source is exhausted
EOF = None


class BitInputStream:
    """Reads fixed-width groups of bits from a binary source."""

    def __init__(self, source, chunk_size=4096):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self.file = source
        self.chunk_size = chunk_size
        self.chunk = b""  # bytes read from the file ahead of the bit buffer
        self.pos = 0
        self.buffer = 0   # bits fetched from the chunk but not yet returned
        self.n_bits = 0
        self.bits_read = 0

    def read_bits(self, num_bits):
        """Return the next num_bits as an int, or EOF if not enough remain."""
        while self.n_bits < num_bits:
            if self.pos >= len(self.chunk):
                self.chunk = self.file.read(self.chunk_size)
                self.pos = 0
                if not self.chunk:
                    return EOF
            self.buffer = (self.buffer << 8) | self.chunk[self.pos]
            self.pos += 1
            self.n_bits += 8

        self.n_bits -= num_bits
        value = self.buffer >> self.n_bits
        # keep only the bits not handed out yet
        self.buffer &= (1 << self.n_bits) - 1
        self.bits_read += num_bits
        return value

    def reset(self):
        """Rewind to the first bit of the source."""
        if not self.file.seekable():
            raise io.UnsupportedOperation("input stream cannot be rewound")
        self.file.seek(0)
        self.chunk = b""
        self.pos = 0
        self.buffer = 0
        self.n_bits = 0
        self.bits_read = 0

    def close(self):
        self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class BitOutputStream:
    """Writes fixed-width groups of bits to a binary sink."""

    def __init__(self, sink):
        self.file = sink
        self.buffer = 0   # pending bits, fewer than 8 after every write
        self.n_bits = 0
        self.bits_written = 0

    def write_bits(self, num_bits, value):
        """Append the low num_bits of value, most significant bit first."""
        if num_bits < 0:
            raise ValueError(f"negative bit count: {num_bits}")
        if value < 0 or value >> num_bits:
            raise ValueError(f"value {value} does not fit in {num_bits} bits")
        if num_bits == 0:
            return

        self.buffer = (self.buffer << num_bits) | value
        self.n_bits += num_bits
        self.bits_written += num_bits

        if self.n_bits >= 8:
            whole = self.n_bits // 8
            self.n_bits -= whole * 8
            self.file.write((self.buffer >> self.n_bits).to_bytes(whole, "big"))
            self.buffer &= (1 << self.n_bits) - 1

    def flush(self):
        """Write out a trailing partial byte, padded with zero bits."""
        if self.n_bits > 0:
            self.file.write(bytes([self.buffer << (8 - self.n_bits)]))
            self.buffer = 0
            self.n_bits = 0
        self.file.flush()

    def close(self):
        self.flush()
        self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
