"""
examples/generate_credit_memo.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Generate a credit memo from a JSON request file, without the HTTP server.

Usage
-----
    python -m examples.generate_credit_memo
    python -m examples.generate_credit_memo --file my_request.json
    python -m examples.generate_credit_memo --summary-only
    python -m examples.generate_credit_memo --validate
    python -m examples.generate_credit_memo --output result.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from creditmemo import CreditMemoGenerationError, CreditMemoRequest, CreditMemoService

logging.basicConfig(level=logging.WARNING, format="%(levelname)s  %(name)s: %(message)s")

DEFAULT_REQUEST = Path(__file__).parent / "sample_request.json"


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a credit memo from a JSON request.")
    parser.add_argument("--file", type=Path, default=DEFAULT_REQUEST,
                        help="Path to a CreditMemoRequest JSON file.")
    parser.add_argument("--summary-only", action="store_true",
                        help="Only generate the management summary.")
    parser.add_argument("--validate", action="store_true",
                        help="Only run the risk assessment.")
    parser.add_argument("--output", type=Path, default=None,
                        help="Also write the full JSON result to this file.")
    args = parser.parse_args()

    try:
        request = CreditMemoRequest.model_validate_json(args.file.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        print(f"[error] Invalid request file: {exc}", file=sys.stderr)
        return 1

    service = CreditMemoService()

    try:
        if args.summary_only:
            result = {"summary": service.generate_summary(request)}
            print(result["summary"])
        elif args.validate:
            result = service.validate_request(request).to_dict()
            print(json.dumps(result, indent=2))
        else:
            response = service.generate_credit_memo(request)
            result = response.to_dict()
            print(response.credit_memo_document)
            print(f"Summary : {response.summary}")
            print(f"Status  : {response.status.value}")
            print(f"Took    : {response.metadata.processing_time_ms} ms ({response.metadata.model})")
    except CreditMemoGenerationError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(json.dumps(result, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"Saved → {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
