"""
Command line entry point.

Usage:
    python -m mcq_extractor quiz.pdf
    python -m mcq_extractor quiz.pdf --output questions.json --log-level DEBUG
"""

import argparse
import json
import sys
from pathlib import Path

from mcq_extractor.config import PipelineConfig
from mcq_extractor.logger import setup_logging
from mcq_extractor.parser import extract_questions


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcq_extractor",
        description="Extract multiple-choice questions from a PDF",
    )
    parser.add_argument("file", help="PDF file to process")
    parser.add_argument("--output", "-o", help="Write the JSON result here instead of stdout")
    parser.add_argument("--model", help="Structuring model name")
    parser.add_argument("--base-url", help="Structuring service base URL")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    config = PipelineConfig.from_env()
    if args.model:
        config.structuring.model = args.model
    if args.base_url:
        config.structuring.base_url = args.base_url

    response = extract_questions(file_path=args.file, config=config)
    payload = json.dumps(response.to_dict(), ensure_ascii=False, indent=2)

    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
    else:
        print(payload)

    return 0 if response.success else 1


if __name__ == "__main__":
    sys.exit(main())
