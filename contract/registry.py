"""Named transactions and host-side dispatch."""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from ledger.transaction import Ledger

from .errors import UnknownTransactionError

F = TypeVar("F", bound=Callable[..., object])

_INFO_ATTR = "__transaction_info__"


@dataclass(frozen=True)
class TransactionInfo:
    name: str
    method: str
    submit: bool


class Contract(Protocol):
    def transactions(self) -> dict[str, TransactionInfo]: ...


def transaction(name: str, submit: bool = True) -> Callable[[F], F]:
    """Register a contract method under a host-visible transaction name.

    ``submit=False`` marks an evaluate-only (read-only) transaction whose
    writes are never committed.
    """

    def decorator(fn: F) -> F:
        setattr(fn, _INFO_ATTR, TransactionInfo(name=name, method=fn.__name__, submit=submit))
        return fn

    return decorator


def collect_transactions(cls: type) -> dict[str, TransactionInfo]:
    found: dict[str, TransactionInfo] = {}
    for attr in dir(cls):
        info = getattr(getattr(cls, attr, None), _INFO_ATTR, None)
        if isinstance(info, TransactionInfo):
            found[info.name] = info
    return dict(sorted(found.items()))


def render_result(result: object) -> str:
    """Render a transaction result the way the host returns it."""
    if result is None:
        return ""
    if isinstance(result, (bytes, bytearray)):
        return bytes(result).decode("utf-8", errors="replace")
    if isinstance(result, str):
        return result
    return json.dumps(result, sort_keys=True, ensure_ascii=False)


def invoke(ledger: Ledger, contract: Contract, name: str, *args: str) -> str:
    """Run transaction ``name`` in its own ledger transaction.

    Raises:
        UnknownTransactionError: If no transaction is registered under name
        ValueError: If the argument count does not match the transaction
    """
    info = contract.transactions().get(name)
    if info is None:
        raise UnknownTransactionError(name)
    method = getattr(contract, info.method)
    parameters = list(inspect.signature(method).parameters)[1:]
    if len(args) != len(parameters):
        raise ValueError(
            f"{name} expects {len(parameters)} argument(s) ({', '.join(parameters)}), got {len(args)}"
        )
    with ledger.transaction(read_only=not info.submit) as ctx:
        return render_result(method(ctx, *args))
