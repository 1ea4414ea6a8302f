"""
txverify CLI - operator tooling for the payment verification service.

Usage:
    txverify verify TXID CURRENCY AMOUNT [--json]
    txverify serve [--host HOST] [--port PORT]
    txverify token CALLER_ID [--expires-minutes N]
    txverify api-key [--rounds N]
"""

import argparse
import asyncio
import json
import sys
from datetime import timedelta

from txverify.config import get_settings
from txverify.engine import build_engine
from txverify.logging_config import configure_logging, get_logger
from txverify.models import VerificationRequest, VerificationStatus

logger = get_logger(__name__)

# Exit codes for `verify`, so shell scripts can poll
EXIT_CONFIRMED = 0
EXIT_FAILED = 1
EXIT_PENDING = 2


def cmd_verify(args) -> int:
    """Run one live verification and print the verdict."""
    engine = build_engine(get_settings())
    try:
        request = VerificationRequest(
            transaction_id=args.txid,
            currency=args.currency,
            expected_amount=args.amount,
        )
    except ValueError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return EXIT_FAILED

    verdict = asyncio.run(engine.verify(request, caller_id="cli"))

    if args.json:
        print(json.dumps(verdict.to_dict(), indent=2))
    else:
        print(f"{verdict.status.value}: {verdict.message} (confirmations={verdict.confirmations})")

    if verdict.status == VerificationStatus.confirmed:
        return EXIT_CONFIRMED
    if verdict.status == VerificationStatus.pending:
        return EXIT_PENDING
    return EXIT_FAILED


def cmd_serve(args) -> int:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("txverify.api.main:app", host=args.host, port=args.port, log_level="info")
    return 0


def cmd_token(args) -> int:
    """Issue a JWT for a caller."""
    from txverify.api.auth import create_access_token

    settings = get_settings()
    expires = timedelta(minutes=args.expires_minutes) if args.expires_minutes else None
    print(create_access_token(args.caller_id, settings, expires_delta=expires))
    return 0


def cmd_api_key(args) -> int:
    """Generate an API key and the record to put in API_KEYS."""
    from txverify.api.auth import api_key_record, generate_api_key

    key = generate_api_key()
    print(f"API key (shown once): {key}")
    print(f"API_KEYS record:      {api_key_record(key, rounds=args.rounds)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txverify",
        description="On-chain payment verification",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_verify = subparsers.add_parser("verify", help="Verify a payment transaction")
    p_verify.add_argument("txid", help="Transaction id (64 hex chars, optional 0x)")
    p_verify.add_argument("currency", help="Currency code, e.g. BTC, ETH, USDT, USDC")
    p_verify.add_argument("amount", help="Expected amount in whole units")
    p_verify.add_argument("--json", action="store_true", help="Print the verdict as JSON")

    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)

    p_token = subparsers.add_parser("token", help="Issue a JWT for a caller")
    p_token.add_argument("caller_id")
    p_token.add_argument("--expires-minutes", type=int, default=None)

    p_key = subparsers.add_parser("api-key", help="Generate an API key and its API_KEYS record")
    p_key.add_argument("--rounds", type=int, default=12, help="bcrypt cost factor")

    return parser


COMMANDS = {
    "verify": cmd_verify,
    "serve": cmd_serve,
    "token": cmd_token,
    "api-key": cmd_api_key,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
