"""
Typed Exception Hierarchy for the Asset Ledger.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the contract must be able to tell a failed write apart from a
lost notification without parsing messages:

    try:
        service.create_car("CAR9", "Fiat", "Punto", "violet", "Pari")
    except EmitError as e:
        # The record IS persisted; only the CarCreated event may be lost.
        schedule_event_replay(e.key)
    except PersistenceError as e:
        # Nothing was written.
        api_response(code=e.code, key=e.key)

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (operation, key, reason, ...)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AssetLedgerError (base)
    |
    +-- ValidationError
    |   +-- InvalidAssetIDError
    |
    +-- CodecError
    |   +-- EncodeError
    |   +-- DecodeError
    |
    +-- LedgerStoreError          (raised by store adapters)
    +-- PersistenceError          (raised by the service: write/scan failed)
    +-- EmitError                 (raised by the service: write ok, event failed)
    +-- AssetNotFoundError
    |
    +-- ContractError
        +-- UnknownFunctionError
        +-- InvalidArgumentsError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                 | When Raised
-------------|----------------------|--------------------------------------------
Validation   | INVALID_ASSET_ID     | assetID is empty or not a string
-------------|----------------------|--------------------------------------------
Codec        | ENCODE_ERROR         | Record field is not representable
             | DECODE_ERROR         | Stored bytes are not a valid record
-------------|----------------------|--------------------------------------------
Store        | LEDGER_STORE_ERROR   | Adapter-level failure (engine, cursor)
             | PERSISTENCE_ERROR    | Put / get / range scan failed in an operation
             | EMIT_ERROR           | Event emission failed after the write
             | ASSET_NOT_FOUND      | Point read found no record
-------------|----------------------|--------------------------------------------
Contract     | UNKNOWN_FUNCTION     | Dispatch to an unregistered function name
             | INVALID_ARGUMENTS    | Wrong number of string arguments

===============================================================================
DESIGN DECISIONS
===============================================================================

1. EmitError is a sibling of PersistenceError, never a subclass.
   ``except PersistenceError`` must not catch a lost notification, since
   the write it follows has already been flushed.

2. LedgerStoreError stays at the adapter boundary.  The service re-raises
   it as PersistenceError or EmitError with the operation name and key,
   chaining the original as ``__cause__``.

===============================================================================
"""


class AssetLedgerError(Exception):
    """
    Base exception for all asset ledger errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ASSET_LEDGER_ERROR"


# Validation exceptions


class ValidationError(AssetLedgerError):
    """Base exception for input validation errors."""

    code: str = "VALIDATION_ERROR"


class InvalidAssetIDError(ValidationError):
    """Asset ID is empty or not a string; it cannot address the world state."""

    code: str = "INVALID_ASSET_ID"

    def __init__(self, asset_id: object):
        self.asset_id = asset_id
        super().__init__(f"Invalid asset ID: {asset_id!r}")


# Codec exceptions


class CodecError(AssetLedgerError):
    """Base exception for record encoding/decoding errors."""

    code: str = "CODEC_ERROR"


class EncodeError(CodecError):
    """An in-memory record could not be encoded."""

    code: str = "ENCODE_ERROR"

    def __init__(self, asset_id: object, reason: str):
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"Failed to encode asset {asset_id!r}: {reason}")


class DecodeError(CodecError):
    """Stored bytes are not a valid encoded asset record."""

    code: str = "DECODE_ERROR"

    def __init__(self, reason: str, key: str | None = None):
        self.key = key
        self.reason = reason
        where = f" at key {key!r}" if key is not None else ""
        super().__init__(f"Failed to decode asset{where}: {reason}")


# Store exceptions


class LedgerStoreError(AssetLedgerError):
    """
    The underlying world-state store rejected an operation.

    Raised by LedgerStore adapters only.  Services translate it into
    PersistenceError or EmitError.
    """

    code: str = "LEDGER_STORE_ERROR"

    def __init__(self, operation: str, reason: str, key: str | None = None):
        self.operation = operation
        self.key = key
        self.reason = reason
        where = f" for key {key!r}" if key is not None else ""
        super().__init__(f"Ledger store {operation} failed{where}: {reason}")


class PersistenceError(AssetLedgerError):
    """A world-state read or write failed during a contract operation."""

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str, key: str | None = None):
        self.operation = operation
        self.key = key
        self.reason = reason
        where = f" for key {key!r}" if key is not None else ""
        super().__init__(f"{operation} failed{where}: {reason}")


class EmitError(AssetLedgerError):
    """
    Event emission failed after a successful write.

    The record identified by ``key`` is persisted; the notification may be
    lost.
    """

    code: str = "EMIT_ERROR"

    def __init__(
        self,
        operation: str,
        event_name: str,
        reason: str,
        key: str | None = None,
    ):
        self.operation = operation
        self.event_name = event_name
        self.key = key
        self.reason = reason
        super().__init__(
            f"{operation} failed to emit {event_name} for key {key!r}: {reason}"
        )


class AssetNotFoundError(AssetLedgerError):
    """No record exists at the given asset ID."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


# Contract dispatch exceptions


class ContractError(AssetLedgerError):
    """Base exception for contract invocation errors."""

    code: str = "CONTRACT_ERROR"


class UnknownFunctionError(ContractError):
    """The invoked function name is not exposed by the contract."""

    code: str = "UNKNOWN_FUNCTION"

    def __init__(self, function_name: str):
        self.function_name = function_name
        super().__init__(f"Unknown contract function: {function_name}")


class InvalidArgumentsError(ContractError):
    """The invoked function received the wrong number of arguments."""

    code: str = "INVALID_ARGUMENTS"

    def __init__(self, function_name: str, expected: int, received: int):
        self.function_name = function_name
        self.expected = expected
        self.received = received
        super().__init__(
            f"{function_name} expects {expected} argument(s), got {received}"
        )
