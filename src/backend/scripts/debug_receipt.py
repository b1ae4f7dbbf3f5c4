#!/usr/bin/env python3
"""
Debug script to see what the parser extracts from a receipt.

Usage:
    python scripts/debug_receipt.py receipt.txt
    python scripts/debug_receipt.py receipt.jpg --image
    python scripts/debug_receipt.py receipt.txt --json
"""

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from keihi.services.ocr import OCRError, OCRService
from keihi.services.parser import parse_receipt_text
from keihi.utils.money import format_yen


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Extract expense fields from a receipt")
    ap.add_argument("path", help="OCR text file, or an image with --image")
    ap.add_argument("--image", action="store_true", help="Run OCR on the file first")
    ap.add_argument("--json", action="store_true", help="Print the result as JSON")
    ap.add_argument("-v", "--verbose", action="store_true", help="Show parser debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    path = Path(args.path)
    if args.image:
        try:
            text = OCRService().extract_text_from_image(path.read_bytes())
        except OCRError as e:
            print(f"OCR failed: {e}", file=sys.stderr)
            return 1
    else:
        text = path.read_text(encoding="utf-8")

    result = parse_receipt_text(text)

    if args.json:
        print(result.model_dump_json(indent=2))
        return 0

    print("=" * 60)
    print(f"Receipt: {path.name}")
    print("=" * 60)
    print("\nEXTRACTED TEXT:")
    print("-" * 60)
    print(text)
    print("-" * 60)
    print(f"\nDate:     {result.date or 'N/A'}")
    print(f"Amount:   {format_yen(result.amount)}")
    print(f"Vendor:   {result.vendor or 'N/A'}")
    print(f"Category: {result.category.value if result.category else 'N/A'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
