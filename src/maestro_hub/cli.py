"""
maestro-hub command line.

Usage:
    maestro-hub status
    maestro-hub accounts
    maestro-hub balance
    maestro-hub transactions --limit 10
    maestro-hub route --amount 500 --currency AED
    maestro-hub transfer --provider wio --from-account WIO001 --to-beneficiary BEN1 --amount 250
    maestro-hub prices
    maestro-hub convert BTC 0.5

Every command prints JSON on stdout; logs go to stderr.
"""

import argparse
import asyncio
import os
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from maestro_hub.adapters.banks import build_bank_registry
from maestro_hub.core.config import Settings
from maestro_hub.core.logging_config import configure_logging
from maestro_hub.core.serialization import dumps
from maestro_hub.core.types import BankProvider, TransferRequest
from maestro_hub.services.banking.aggregator import BankingAggregator
from maestro_hub.services.crypto.aggregator import CryptoPriceAggregator
from maestro_hub.services.status.reporter import StatusReporter


@dataclass
class Services:
    banking: BankingAggregator
    crypto: CryptoPriceAggregator
    status: StatusReporter


def build_services(settings: Settings) -> Services:
    """Wire the aggregators and status reporter from one Settings instance."""
    registry = build_bank_registry(settings)
    banking = BankingAggregator(registry, timeout=settings.provider_timeout)
    crypto = CryptoPriceAggregator.from_settings(settings)
    return Services(banking=banking, crypto=crypto, status=StatusReporter(registry, crypto))


def _decimal(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    return amount


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="maestro-hub", description="UAE banking and crypto aggregation hub")
    ap.add_argument("--env-file", type=Path, help="Load credentials from this .env file")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="System health and provider configuration")
    sub.add_parser("accounts", help="Accounts across all banks")
    sub.add_parser("balance", help="Total balance by currency and provider")

    tx = sub.add_parser("transactions", help="Recent transactions (or one account's)")
    tx.add_argument("--limit", type=int, default=20)
    tx.add_argument("--provider", choices=[p.value for p in BankProvider])
    tx.add_argument("--account", help="Account id (requires --provider)")
    tx.add_argument("--from-date", type=date.fromisoformat)
    tx.add_argument("--to-date", type=date.fromisoformat)

    sub.add_parser("beneficiaries", help="Beneficiaries from supporting banks")

    route = sub.add_parser("route", help="Recommend a bank for a payment")
    route.add_argument("--amount", type=_decimal, required=True)
    route.add_argument("--currency", default="AED")

    transfer = sub.add_parser("transfer", help="Submit a transfer")
    transfer.add_argument("--provider", required=True)
    transfer.add_argument("--from-account", required=True)
    transfer.add_argument("--to-beneficiary", required=True)
    transfer.add_argument("--amount", type=_decimal, required=True)
    transfer.add_argument("--currency", default="AED")
    transfer.add_argument("--purpose", default="")
    transfer.add_argument("--reference", default="")

    sub.add_parser("prices", help="Merged crypto prices")

    convert = sub.add_parser("convert", help="Convert a crypto amount to AED")
    convert.add_argument("symbol")
    convert.add_argument("amount", type=float)

    sub.add_parser("sources", help="Price source health")
    return ap


async def run_command(args: argparse.Namespace, services: Services) -> Any:
    """Execute one parsed command and return its JSON-ready result."""
    command = args.command

    if command == "status":
        return await services.status.get_system_status()
    if command == "accounts":
        return await services.banking.get_all_accounts()
    if command == "balance":
        return await services.banking.get_total_balance()
    if command == "transactions":
        if args.account:
            if not args.provider:
                raise ValueError("--account requires --provider")
            return await services.banking.get_account_transactions(
                BankProvider(args.provider),
                args.account,
                from_date=args.from_date,
                to_date=args.to_date,
                limit=args.limit,
            )
        return await services.banking.get_recent_transactions(limit=args.limit)
    if command == "beneficiaries":
        return await services.banking.get_all_beneficiaries()
    if command == "route":
        return services.banking.find_best_payment_route(args.amount, args.currency)
    if command == "transfer":
        return await services.banking.make_transfer(TransferRequest(
            provider=args.provider,
            from_account_id=args.from_account,
            to_beneficiary_id=args.to_beneficiary,
            amount=args.amount,
            currency=args.currency,
            purpose=args.purpose,
            reference=args.reference,
        ))
    if command == "prices":
        return await services.crypto.get_unified_crypto_prices()
    if command == "convert":
        return await services.crypto.convert_crypto_to_aed(args.symbol, args.amount)
    if command == "sources":
        return await services.crypto.get_price_sources_status()

    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_dir = os.getenv("MAESTRO_LOG_DIR")
    configure_logging(
        level=os.getenv("MAESTRO_LOG_LEVEL", "WARNING"),
        log_dir=Path(log_dir) if log_dir else None,
        enable_file=bool(log_dir),
        serialize=os.getenv("MAESTRO_LOG_JSON", "false").lower() == "true",
    )

    try:
        settings = Settings.from_env(dotenv_path=str(args.env_file) if args.env_file else None)
        result = asyncio.run(run_command(args, build_services(settings)))
    except ValueError as e:
        logger.error(f"{args.command} failed: {e}")
        print(dumps({"success": False, "error": str(e)}, indent=2))
        return 2

    print(dumps(result, indent=2))

    # Failed transfers are reported as data; signal them in the exit code too
    if args.command == "transfer" and not result.success:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
