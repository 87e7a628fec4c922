"""Command-line entry point: answer one question without the HTTP server."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from pubqa.utils.errors import PubQAError
from pubqa.utils.logging_config import setup_logging
from pubqa.utils.settings import settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pubqa-ask",
        description="Answer a question from the saved PubMed articles and print the JSON response.",
    )
    parser.add_argument("question", help="Question to answer")
    parser.add_argument(
        "--log-level",
        default=settings.app.log_level,
        help="Logging level (default: %(default)s)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries the JSON response
    setup_logging(level=args.log_level, stream=sys.stderr)

    from pubqa.pipelines.qa import QAPipeline

    try:
        result = QAPipeline().answer(args.question)
    except PubQAError as e:
        logger.error(f"❌ {e.code}: {e.message}")
        body = {"error": e.message, "code": e.code}
        if e.details:
            body["details"] = e.details
        print(json.dumps(body, ensure_ascii=False, indent=2))
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
