#!/usr/bin/env python3
"""
Huffman compression tool.

Usage:
    Compress:   huffman compress input.txt output.hf
    Decompress: huffman decompress input.hf output.txt
    Add --debug 1 for a summary of each run, --debug 4 for code tables.
"""

import argparse
import logging
import sys

from huffman_errors import HuffmanError
from huffman_service import DEBUG_HIGH, DEBUG_LEVELS, DEBUG_NONE, HuffmanService


def build_parser():
    parser = argparse.ArgumentParser(prog="huffman", description="Huffman compression")
    sub = parser.add_subparsers(dest="mode", required=True)

    for mode in ("compress", "decompress"):
        p = sub.add_parser(mode)
        p.add_argument("input")
        p.add_argument("output")
        p.add_argument("--debug", type=int, default=DEBUG_NONE, choices=DEBUG_LEVELS,
                       help="0 quiet, 1 per-run summary, 4 also counts and codes")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug >= DEBUG_HIGH else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    service = HuffmanService(debug=args.debug)

    try:
        if args.mode == "compress":
            stats = service.compress_file(args.input, args.output)
        else:
            stats = service.decompress_file(args.input, args.output)
    except (HuffmanError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{args.mode.capitalize()}ed: {args.input} -> {args.output} "
          f"({stats.bits_read} bits read, {stats.bits_written} bits written)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
