"""
Command-line entry point: run one contract function per invocation.

Usage:
    python -m asset_ledger init [--atomic]
    python -m asset_ledger create CAR9 Fiat Punto violet Pari
    python -m asset_ledger query-all
    python -m asset_ledger query CAR9
    python -m asset_ledger create-tables

Each run is one transaction: the function executes inside
``session_scope()`` and is committed on success.  An EmitError is reported
after the write is committed, since the record is persisted regardless.

Exit codes:
    0  success
    1  the function failed; nothing was committed
    2  the record was committed but its event could not be emitted
"""

import argparse
import json
import sys
from dataclasses import replace
from uuid import uuid4

from asset_config import get_active_config
from asset_ledger.contract import AssetContract, TransactionContext
from asset_ledger.db.engine import (
    create_tables,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from asset_ledger.exceptions import AssetLedgerError, EmitError
from asset_ledger.logging_config import configure_logging, get_logger
from asset_ledger.store.sql import SqlLedgerStore

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asset_ledger", description="Invoke the car asset contract"
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--database-url", help="Override the configured database URL")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Seed the ledger with CAR0..CAR5")
    init.add_argument(
        "--atomic", action="store_true", help="Write the seed set all-or-nothing"
    )

    create = sub.add_parser("create", help="Create or overwrite a car")
    for name in ("asset_id", "make", "model", "color", "owner"):
        create.add_argument(name)

    sub.add_parser("create-tables", help="Create the ledger tables and exit")

    sub.add_parser("query-all", help="List every car in key order")

    query = sub.add_parser("query", help="Show one car")
    query.add_argument("asset_id")

    return parser


def _function_call(args: argparse.Namespace) -> tuple[str, list[str]]:
    if args.command == "create-tables":
        return "create-tables", []
    if args.command == "init":
        return "InitLedger", []
    if args.command == "create":
        return "CreateCar", [args.asset_id, args.make, args.model, args.color, args.owner]
    if args.command == "query-all":
        return "QueryAllCars", []
    return "QueryCar", [args.asset_id]


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = get_active_config(args.config)
    if args.database_url:
        config = replace(config, database_url=args.database_url)

    configure_logging(level=config.log_level)
    init_engine_from_url(
        config.database_url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
    )

    contract = AssetContract(
        atomic_init=config.atomic_init or getattr(args, "atomic", False)
    )
    function, function_args = _function_call(args)
    tx_id = uuid4().hex
    emit_error: EmitError | None = None

    try:
        create_tables()
        if function == "create-tables":
            print(json.dumps({"status": "ok", "function": function}, indent=2))
            return 0
        with session_scope() as session:
            store = SqlLedgerStore(session, namespace=config.namespace, tx_id=tx_id)
            ctx = TransactionContext(stub=store, tx_id=tx_id, channel_id=config.channel_id)
            try:
                result = contract.invoke(ctx, function, function_args)
            except EmitError as exc:
                emit_error = exc
                result = None
    except AssetLedgerError as exc:
        logger.error("cli_invoke_failed", extra={"function_name": function}, exc_info=True)
        print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        reset_engine()

    if emit_error is not None:
        print(f"ERROR [{emit_error.code}]: {emit_error}", file=sys.stderr)
        return 2

    if result is None:
        result = {"status": "ok", "function": function, "tx_id": tx_id}
    print(json.dumps(result, indent=2))
    return 0
