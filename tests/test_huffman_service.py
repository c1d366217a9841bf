import logging
import random
import time

import pytest

import huffman_service as hs
from huffman_errors import FormatError, HuffmanError, TruncatedInputError


def _get_service(debug=hs.DEBUG_NONE):
	return hs.HuffmanService(debug=debug)


def test_roundtrip_random_10kb():
	svc = _get_service()

	data = bytes(random.getrandbits(8) for _ in range(10 * 1024))
	compressed = svc.compress(data)
	out = svc.decompress(compressed)
	assert out == data


def test_roundtrip_all_bytes_once():
	svc = _get_service()

	data = bytes(range(256))
	compressed = svc.compress(data)
	out = svc.decompress(compressed)
	assert out == data


def test_empty_input():
	svc = _get_service()
	data = b""
	compressed = svc.compress(data)
	# magic, then a lone end-of-stream leaf and no body bits
	assert compressed == bytes.fromhex("face8201c000")
	out = svc.decompress(compressed)
	assert out == data


def test_single_byte_repeated_small():
	svc = _get_service()

	data = b'A' * (1024 * 10)
	compressed = svc.compress(data)
	out = svc.decompress(compressed)
	assert out == data
	# 53 header bits, one bit per byte, one for PSEUDO_EOF
	assert len(compressed) == (53 + 10 * 1024 + 1 + 7) // 8


def test_small_inputs():
	svc = _get_service()

	for n in (1, 2, 3):
		data = bytes(random.getrandbits(8) for _ in range(n))
		compressed = svc.compress(data)
		out = svc.decompress(compressed)
		assert out == data


def test_aaab_compressed_bytes():
	svc = _get_service()
	compressed = svc.compress(b"AAAB")
	assert compressed == bytes.fromhex("face8201242c0241e2")
	assert svc.last_stats.bits_written == 71
	assert svc.decompress(compressed) == b"AAAB"


def test_compression_is_deterministic():
	data = b'Hello World' * 50 + bytes(range(0, 256, 3))
	assert _get_service().compress(data) == _get_service().compress(data)


def test_text_shrinks():
	data = b'This is a test' * 100
	assert len(_get_service().compress(data)) < len(data) // 2


def test_truncated_stream_behavior():
	svc = _get_service()

	data = b'This is a test' * 100
	compressed = svc.compress(data)
	# the last byte always holds the end of the PSEUDO_EOF code
	with pytest.raises(TruncatedInputError):
		svc.decompress(compressed[:-1])
	with pytest.raises(TruncatedInputError):
		svc.decompress(compressed[:-3])


def test_truncated_header_behavior():
	svc = _get_service()
	compressed = svc.compress(b'Hello World' * 50)
	with pytest.raises(TruncatedInputError):
		svc.decompress(compressed[:6])
	with pytest.raises(TruncatedInputError):
		svc.decompress(b"")


def test_corrupted_header_behavior():
	svc = _get_service()

	data = b'Hello World' * 50
	compressed = bytearray(svc.compress(data))
	# flip some bits in the magic number
	compressed[0] ^= 0xFF
	with pytest.raises(FormatError):
		svc.decompress(bytes(compressed))


def test_debug_level_must_be_known():
	with pytest.raises(ValueError):
		_get_service(debug=2)


def test_debug_low_logs_summary(caplog):
	svc = _get_service(debug=hs.DEBUG_LOW)
	with caplog.at_level(logging.DEBUG, logger="huffman_service"):
		svc.decompress(svc.compress(b"AAAB"))
	messages = [r.getMessage() for r in caplog.records]
	assert "compressed 4 symbols with 3 leaves: header 64 bits, total 71 bits" in messages
	assert any(m.startswith("decompressed") and m.endswith("into 4 bytes") for m in messages)
	assert not any(r.levelno == logging.DEBUG for r in caplog.records)


def test_debug_high_logs_codes(caplog):
	svc = _get_service(debug=hs.DEBUG_HIGH)
	with caplog.at_level(logging.DEBUG, logger="huffman_service"):
		svc.decompress(svc.compress(b"AAAB"))
	messages = [r.getMessage() for r in caplog.records]
	assert "count  65: 3" in messages
	assert "code  65: 1" in messages
	assert "code 256: 01" in messages
	assert "leaf EOF at depth 2" in messages


def test_quiet_service_logs_nothing(caplog):
	svc = _get_service()
	with caplog.at_level(logging.DEBUG, logger="huffman_service"):
		svc.decompress(svc.compress(b"quiet"))
	assert caplog.records == []


def test_file_roundtrip(tmp_path):
	svc = _get_service()
	src = tmp_path / "input.bin"
	packed = tmp_path / "input.hf"
	restored = tmp_path / "restored.bin"
	data = bytes(random.getrandbits(8) for _ in range(4096)) + b"\x00" * 4096
	src.write_bytes(data)

	stats = svc.compress_file(src, packed)
	assert packed.stat().st_size == (stats.bits_written + 7) // 8
	svc.decompress_file(packed, restored)
	assert restored.read_bytes() == data


def test_failed_decompress_removes_output(tmp_path):
	svc = _get_service()
	bad = tmp_path / "bad.hf"
	bad.write_bytes(b"not a huffman file")
	dst = tmp_path / "out.bin"
	with pytest.raises(FormatError):
		svc.decompress_file(bad, dst)
	assert not dst.exists()


def test_missing_input_file_leaves_existing_output(tmp_path):
	svc = _get_service()
	dst = tmp_path / "keep.bin"
	dst.write_bytes(b"keep me")
	with pytest.raises(FileNotFoundError):
		svc.compress_file(tmp_path / "missing.bin", dst)
	assert dst.read_bytes() == b"keep me"


@pytest.mark.timeout(120)
def test_performance_256kb_baseline():
	svc = _get_service()
	data = bytes(random.getrandbits(8) for _ in range(256 * 1024))
	t0 = time.time()
	compressed = svc.compress(data)
	dur = time.time() - t0
	assert svc.decompress(compressed) == data
	assert dur > 0
	print(f"Compression time for 256KB: {dur:.4f}s")


def test_same_input_and_output_file_is_refused(tmp_path):
	svc = _get_service()
	path = tmp_path / "data.bin"
	data = b"important data" * 10
	path.write_bytes(data)

	with pytest.raises(HuffmanError, match="same file"):
		svc.compress_file(path, path)
	with pytest.raises(HuffmanError, match="same file"):
		svc.decompress_file(path, tmp_path / "." / "data.bin")
	assert path.read_bytes() == data
