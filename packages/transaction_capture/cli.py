"""Developer CLI for the capture pipeline.

    python -m packages.transaction_capture.cli parse "INR 500.00 spent on ..."
    python -m packages.transaction_capture.cli categorize "Milk" --merchant Johirul
    python -m packages.transaction_capture.cli demo
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from packages.transaction_capture.category_mapper import detect_bank_account, map_transaction
from packages.transaction_capture.extractor import parse_message
from packages.transaction_capture.pipeline import NotificationPipeline
from packages.transaction_capture.samples import SAMPLE_DEEP_LINK, SAMPLE_MESSAGES
from packages.transaction_capture.store import DEFAULT_BANK_ACCOUNTS, InMemoryLedgerStore


def parse(args):
    text = args.text if args.text != "-" else sys.stdin.read()
    parsed, strategy = parse_message(text.strip())
    if parsed is None:
        print("No transaction found.")
        return 1

    result = parsed.to_dict()
    result["strategy"] = strategy
    result["bank_account_id"] = detect_bank_account(text, DEFAULT_BANK_ACCOUNTS)
    mapping = map_transaction(parsed.description, parsed.merchant, abs(parsed.amount), parsed.type)
    result["category_id"] = mapping.category_id
    result["mapped_description"] = mapping.description
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def categorize(args):
    mapping = map_transaction(args.description, args.merchant, args.amount, args.type)
    print(
        json.dumps(
            {
                "category_id": mapping.category_id,
                "description": mapping.description,
                "person_type": mapping.person_type.value if mapping.person_type else None,
            },
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0


async def _demo():
    store = InMemoryLedgerStore()
    pipeline = NotificationPipeline(store)
    payloads = [(name, {"message": text}) for name, text in SAMPLE_MESSAGES.items()]
    payloads.append(("deep_link", {"url": SAMPLE_DEEP_LINK}))

    for name, payload in payloads:
        result = await pipeline.process_event(payload)
        amount = f"{result.transaction.amount:>10}" if result.transaction else " " * 10
        print(f"{name:<18} {result.outcome.value:<10} {amount}  {result.message or ''}")

    print(f"\n{len(store.transactions)} transactions persisted.")
    return 0


def demo(args):
    return asyncio.run(_demo())


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(description="Bank message capture tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Parse a bank SMS ('-' reads stdin)")
    parse_parser.add_argument("text")
    parse_parser.set_defaults(func=parse)

    categorize_parser = subparsers.add_parser("categorize", help="Run the category cascade")
    categorize_parser.add_argument("description")
    categorize_parser.add_argument("--merchant", default="")
    categorize_parser.add_argument("--amount", type=float, default=0.0)
    categorize_parser.add_argument("--type", choices=["income", "expense"], default="expense")
    categorize_parser.set_defaults(func=categorize)

    demo_parser = subparsers.add_parser("demo", help="Run the sample messages through the pipeline")
    demo_parser.set_defaults(func=demo)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
