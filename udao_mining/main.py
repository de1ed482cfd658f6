"""
Command line entry point for the UDAO mining ledger.
"""

import argparse
import json
import sys
import time

import structlog

from .config import settings
from .database.connection import SessionLocal, init_db
from .runtime.dispatcher import ActionDispatcher
from .utils.exceptions import LedgerException
from .utils.logging import setup_logging


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="UDAO mining ledger")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the ledger tables")

    push = subparsers.add_parser("push", help="Push an action")
    push.add_argument("action", help="Action name, e.g. issue")
    push.add_argument("data", help="Action data as JSON")
    push.add_argument(
        "--auth",
        action="append",
        default=[],
        help="Authorizing account (repeatable)",
    )
    push.add_argument("--now", type=int, help="Invocation time in seconds since epoch")

    notify = subparsers.add_parser("notify", help="Deliver a deposit notification")
    notify.add_argument("data", help="Transfer data as JSON: from, to, quantity, memo")
    notify.add_argument("--contract", default=settings.DEPOSIT_CONTRACT)
    notify.add_argument("--now", type=int, help="Invocation time in seconds since epoch")

    stats = subparsers.add_parser("stats", help="Show the supply record of a symbol")
    stats.add_argument("symbol_code")

    balance = subparsers.add_parser("balance", help="Show an account balance")
    balance.add_argument("account")
    balance.add_argument("symbol_code")

    return parser.parse_args(argv)


def main(argv=None):
    """Main application entry point"""
    args = _parse_args(argv)
    setup_logging("DEBUG" if args.debug else settings.LOG_LEVEL, stream=sys.stderr)
    logger = structlog.get_logger()

    init_db()
    if args.command == "init-db":
        logger.info("Database initialized", database_url=settings.DATABASE_URL)
        return 0

    db = SessionLocal()
    try:
        dispatcher = ActionDispatcher(db)
        if args.command == "push":
            now = args.now if args.now is not None else int(time.time())
            receipt = dispatcher.push_action(args.action, json.loads(args.data), args.auth, now)
            print(json.dumps(receipt.to_dict(), indent=2))
        elif args.command == "notify":
            now = args.now if args.now is not None else int(time.time())
            receipt = dispatcher.push_notification(args.contract, settings.DEPOSIT_ACTION, json.loads(args.data), now)
            print(json.dumps(receipt.to_dict(), indent=2))
        elif args.command == "stats":
            print(json.dumps(dispatcher.registry.query_supply(args.symbol_code).to_dict(), indent=2))
        elif args.command == "balance":
            print(str(dispatcher.registry.query_balance(args.account, args.symbol_code)))
    except LedgerException as e:
        logger.error("Action failed", error_code=e.error_code, error=e.message)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
