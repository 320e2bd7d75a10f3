"""
llmjson — Command-line JSON extraction for LLM output

Reads raw model output from a file or stdin and prints the embedded JSON.

Usage:
    python main.py response.txt                  # Strict extraction
    cat response.txt | python main.py --mode repair
    python main.py response.txt --mode repair --schema schema.json
    python main.py response.txt --check          # Pre-filter checks only
"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv

from llmjson.errors import JsonExtractionError
from llmjson.logging_config import setup_logging
from llmjson.output_parser import MODES, parse_from_llm, has_possible_json, is_json_string
from llmjson.schemas import describe_shape


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract JSON from LLM output")
    parser.add_argument("input", nargs="?",
                        help="File containing the LLM output (default: stdin)")
    parser.add_argument("--mode", choices=MODES,
                        default=os.environ.get("LLMJSON_MODE", "parse"),
                        help="parse: strict extraction; repair: fix syntax and root keys")
    parser.add_argument("--schema",
                        help="JSON Schema file with a single root key (repair mode only)")
    parser.add_argument("--indent", type=int, default=2,
                        help="Indentation of the printed JSON")
    parser.add_argument("--check", action="store_true",
                        help="Only report has_possible_json / is_json_string")
    return parser


def read_input(path: str | None) -> str:
    if path is None:
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    text = read_input(args.input)

    if args.check:
        print(json.dumps({
            "has_possible_json": has_possible_json(text),
            "is_json_string": is_json_string(text),
        }, indent=args.indent))
        return 0

    schema = None
    if args.schema:
        with open(args.schema, encoding="utf-8") as f:
            try:
                schema = describe_shape(json.load(f))
            except (TypeError, ValueError) as e:
                print(f"Invalid schema file {args.schema}: {e}", file=sys.stderr)
                return 2

    try:
        result = parse_from_llm(text, mode=args.mode, schema=schema)
    except JsonExtractionError as e:
        print(f"Error ({e.kind}): {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
