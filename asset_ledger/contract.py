"""
AssetContract -- the invocation boundary.

Responsibility:
    Exposes the ledger-facing functions ``InitLedger``, ``CreateCar``,
    ``QueryAllCars`` and ``QueryCar``.  Each call receives an explicit
    TransactionContext; there is no ambient global store.  ``invoke``
    dispatches by function name with string arguments, the way a peer
    runtime delivers a transaction proposal.

Architecture position:
    Kernel > Contract -- outermost kernel layer.  Builds an AssetService
    per call from the context's store.

Invariants enforced:
    - The contract holds no per-call state; every call constructs its
      service from the context it is given.
    - ``tx_id``, ``channel_id`` and ``function`` are bound into LogContext
      for the duration of each call.

Failure modes:
    - UnknownFunctionError -- ``invoke`` with an unregistered name.
    - InvalidArgumentsError -- ``invoke`` with the wrong argument count.
    - Any AssetLedgerError raised by the service, unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable
from uuid import uuid4

from asset_ledger.domain.asset import AssetRecord
from asset_ledger.exceptions import InvalidArgumentsError, UnknownFunctionError
from asset_ledger.logging_config import LogContext, get_logger
from asset_ledger.services.asset_service import AssetService
from asset_ledger.store.base import LedgerStore

logger = get_logger("contract")


@dataclass(frozen=True)
class TransactionContext:
    """Caller-supplied handle scoping one invocation's store access."""

    stub: LedgerStore
    tx_id: str = field(default_factory=lambda: uuid4().hex)
    channel_id: str = "mychannel"


class AssetContract:
    """
    Car asset contract.

    Args:
        atomic_init: If True, InitLedger writes the seed set all-or-nothing.
    """

    def __init__(self, atomic_init: bool = False):
        self.atomic_init = atomic_init
        self._functions: dict[str, tuple[int, Callable[..., Any]]] = {
            "InitLedger": (0, self._invoke_init_ledger),
            "CreateCar": (5, self._invoke_create_car),
            "QueryAllCars": (0, self._invoke_query_all_cars),
            "QueryCar": (1, self._invoke_query_car),
        }

    @property
    def function_names(self) -> tuple[str, ...]:
        return tuple(self._functions)

    def _service(self, ctx: TransactionContext) -> AssetService:
        return AssetService(ctx.stub)

    def _bind(self, ctx: TransactionContext, function: str):
        return LogContext.bind(
            tx_id=ctx.tx_id, channel_id=ctx.channel_id, function=function
        )

    # ------------------------------------------------------------------
    # Named operations
    # ------------------------------------------------------------------

    def init_ledger(self, ctx: TransactionContext) -> None:
        with self._bind(ctx, "InitLedger"):
            self._service(ctx).init_ledger(atomic=self.atomic_init)

    def create_car(
        self,
        ctx: TransactionContext,
        asset_id: str,
        make: str,
        model: str,
        color: str,
        owner: str,
    ) -> AssetRecord:
        with self._bind(ctx, "CreateCar"):
            return self._service(ctx).create_car(asset_id, make, model, color, owner)

    def query_all_cars(self, ctx: TransactionContext) -> list[AssetRecord]:
        with self._bind(ctx, "QueryAllCars"):
            return self._service(ctx).query_all_cars()

    def query_car(self, ctx: TransactionContext, asset_id: str) -> AssetRecord:
        with self._bind(ctx, "QueryCar"):
            return self._service(ctx).query_car(asset_id)

    # ------------------------------------------------------------------
    # Name-based dispatch
    # ------------------------------------------------------------------

    def invoke(
        self,
        ctx: TransactionContext,
        function_name: str,
        args: list[str] | tuple[str, ...] = (),
    ) -> Any:
        """
        Dispatch ``function_name`` with positional string ``args``.

        Returns:
            None for InitLedger and CreateCar, a dict for QueryCar, and a
            list of dicts (wire field names) for QueryAllCars.
        """
        try:
            arity, handler = self._functions[function_name]
        except KeyError:
            logger.warning("unknown_function", extra={"function_name": function_name})
            raise UnknownFunctionError(function_name) from None

        if len(args) != arity:
            raise InvalidArgumentsError(function_name, arity, len(args))

        logger.debug("invoke", extra={"function_name": function_name, "arg_count": len(args)})
        return handler(ctx, *args)

    def _invoke_init_ledger(self, ctx: TransactionContext) -> None:
        self.init_ledger(ctx)

    def _invoke_create_car(self, ctx: TransactionContext, *args: str) -> None:
        self.create_car(ctx, *args)

    def _invoke_query_all_cars(self, ctx: TransactionContext) -> list[dict[str, str]]:
        return [car.to_dict() for car in self.query_all_cars(ctx)]

    def _invoke_query_car(self, ctx: TransactionContext, asset_id: str) -> dict[str, str]:
        return self.query_car(ctx, asset_id).to_dict()
