"""Raw transaction normalization and entity profile construction.

Callers send records exported from many core-banking and wallet systems, so
field names and casing vary. Records are mapped onto the canonical
Transaction shape; anything without a usable amount and timestamp is
rejected with a reason and the rest of the batch continues.
"""

import math
import numbers
import re
import statistics
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import Any

import structlog

from .models import (
    Direction,
    EntityProfile,
    NormalizationFailure,
    NormalizationResult,
    Transaction,
)

logger = structlog.get_logger()

# Namespace for synthetic ids; never change it or ids stop being stable
_SYNTHETIC_ID_NAMESPACE = uuid.UUID("6f1c9f8e-4b7a-4d0e-9a51-2f3c8d7e6b10")

# Epoch values above this are milliseconds
_EPOCH_MS_CUTOFF = 1e11

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "transactionid", "txid", "txnid", "reference_id"),
    "timestamp": ("timestamp", "date", "transactiondate", "datetime", "bookingdate", "createdat"),
    "amount": ("amount", "value", "transactionamount", "amt"),
    "currency": ("currency", "ccy", "currencycode"),
    "direction": ("direction", "creditdebit", "drcr", "side"),
    "transaction_type": ("type", "transactiontype", "txtype"),
    "counterparty_name": ("counterparty", "counterpartyname", "beneficiary", "beneficiaryname", "payee"),
    "counterparty_country": ("counterpartycountry", "country", "beneficiarycountry"),
    "counterparty_account": ("counterpartyaccount", "beneficiaryaccount", "iban"),
    "channel": ("channel",),
    "merchant_category_code": ("mcc", "merchantcategorycode"),
    "description": ("description", "narrative", "memo", "freetextdescription"),
    "reference": ("reference",),
    "chain_address": ("chainaddress", "cryptoaddress", "walletaddress"),
    "blockchain": ("blockchain", "chain", "network"),
}

_CREDIT_WORDS = frozenset({"CREDIT", "CR", "C", "IN", "INBOUND", "INCOMING", "DEPOSIT", "RECEIVED"})
_DEBIT_WORDS = frozenset({"DEBIT", "DR", "D", "OUT", "OUTBOUND", "OUTGOING", "WITHDRAWAL", "SENT"})

_AMOUNT_NOISE = re.compile(r"[\s,$€£]")


class RecordRejected(ValueError):
    """A raw record cannot be mapped onto a Transaction."""


def _key(name: str) -> str:
    return re.sub(r"[\s_\-]", "", name).lower()


def _index_record(record: Mapping[str, Any]) -> dict[str, Any]:
    indexed: dict[str, Any] = {}
    for name, value in record.items():
        if value is None or value == "":
            continue
        indexed.setdefault(_key(str(name)), value)
    return indexed


def _lookup(indexed: dict[str, Any], field: str) -> Any:
    for alias in _FIELD_ALIASES[field]:
        value = indexed.get(_key(alias))
        if value is not None:
            return value
    return None


def _parse_amount(value: Any) -> float:
    if value is None:
        raise RecordRejected("missing amount")
    if isinstance(value, bool):
        raise RecordRejected("amount is a boolean")
    if isinstance(value, (numbers.Real, Decimal)):
        try:
            amount = float(value)
        except ValueError as exc:
            # Decimal("sNaN") refuses conversion
            raise RecordRejected(f"non-finite amount {value!r}") from exc
    elif isinstance(value, str):
        cleaned = _AMOUNT_NOISE.sub("", value)
        # Accounting negatives: (1,234.00)
        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = "-" + cleaned[1:-1]
        try:
            amount = float(cleaned)
        except ValueError as exc:
            raise RecordRejected(f"unparseable amount {value!r}") from exc
    else:
        raise RecordRejected(f"unsupported amount type {type(value).__name__}")

    if not math.isfinite(amount):
        raise RecordRejected(f"non-finite amount {value!r}")
    return amount


def _parse_timestamp(value: Any) -> datetime:
    if value is None:
        raise RecordRejected("missing timestamp")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > _EPOCH_MS_CUTOFF else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise RecordRejected(f"epoch out of range {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise RecordRejected(f"unparseable timestamp {value!r}") from exc
    else:
        raise RecordRejected(f"unsupported timestamp type {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _parse_direction(value: Any, amount: float) -> Direction:
    if value is not None:
        word = str(value).strip().upper()
        if word in _CREDIT_WORDS:
            return Direction.CREDIT
        if word in _DEBIT_WORDS:
            return Direction.DEBIT
    return Direction.CREDIT if amount > 0 else Direction.DEBIT


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _synthetic_id(index: int, timestamp: datetime, amount: float, counterparty: str) -> str:
    seed = f"{index}|{timestamp.isoformat()}|{amount!r}|{counterparty}"
    return f"tx-{uuid.uuid5(_SYNTHETIC_ID_NAMESPACE, seed).hex[:16]}"


def normalize_record(
    record: Mapping[str, Any], index: int, default_currency: str = "USD"
) -> Transaction:
    """Map one raw record onto a Transaction. Raises RecordRejected."""
    if not isinstance(record, Mapping):
        raise RecordRejected(f"record is a {type(record).__name__}, not an object")

    indexed = _index_record(record)
    amount = _parse_amount(_lookup(indexed, "amount"))
    timestamp = _parse_timestamp(_lookup(indexed, "timestamp"))
    counterparty = _text(_lookup(indexed, "counterparty_name"))

    tx_id = _text(_lookup(indexed, "id")) or _synthetic_id(index, timestamp, amount, counterparty)
    currency = _text(_lookup(indexed, "currency")).upper() or default_currency
    tx_type = _text(_lookup(indexed, "transaction_type")).upper() or "UNKNOWN"
    channel = _text(_lookup(indexed, "channel")).upper() or "UNKNOWN"

    return Transaction(
        id=tx_id,
        timestamp=timestamp,
        amount=amount,
        currency=currency,
        direction=_parse_direction(_lookup(indexed, "direction"), amount),
        transaction_type=tx_type,
        counterparty_name=counterparty,
        counterparty_country=_text(_lookup(indexed, "counterparty_country")).upper(),
        counterparty_account=_text(_lookup(indexed, "counterparty_account")),
        channel=channel,
        merchant_category_code=_text(_lookup(indexed, "merchant_category_code")),
        description=_text(_lookup(indexed, "description")),
        reference=_text(_lookup(indexed, "reference")),
        chain_address=_text(_lookup(indexed, "chain_address")) or None,
        blockchain=_text(_lookup(indexed, "blockchain")).upper(),
        sequence=index,
    )


def normalize_transactions(
    records: Iterable[Mapping[str, Any]], default_currency: str = "USD"
) -> NormalizationResult:
    """Normalize a batch, ordered by timestamp with ties kept in input order."""
    transactions: list[Transaction] = []
    rejected: list[NormalizationFailure] = []

    for index, record in enumerate(records):
        try:
            transactions.append(normalize_record(record, index, default_currency))
        except RecordRejected as exc:
            rejected.append(NormalizationFailure(index=index, reason=str(exc)))
            logger.info("transaction_record_rejected", index=index, reason=str(exc))

    # sorted() is stable and sequence is the input position
    transactions = sorted(transactions, key=lambda t: (t.timestamp, t.sequence))

    if rejected:
        logger.warning(
            "transaction_records_dropped",
            accepted=len(transactions),
            rejected=len(rejected),
        )

    return NormalizationResult(transactions=transactions, rejected=rejected)


def build_profile(transactions: list[Transaction]) -> EntityProfile:
    """Aggregate statistics over a normalized, time-ordered transaction list."""
    if not transactions:
        return EntityProfile()

    amounts = [t.magnitude for t in transactions]
    total = math.fsum(amounts)
    counterparties = {t.counterparty_name for t in transactions if t.counterparty_name}
    countries = sorted({t.counterparty_country for t in transactions if t.counterparty_country})
    channels = sorted({t.channel for t in transactions if t.channel})

    first = min(t.timestamp for t in transactions)
    last = max(t.timestamp for t in transactions)
    day_span = max(1.0, (last - first).total_seconds() / 86400)

    return EntityProfile(
        average_amount=total / len(amounts),
        median_amount=statistics.median(amounts),
        max_amount=max(amounts),
        total_volume=total,
        transaction_count=len(transactions),
        transactions_per_day=len(transactions) / day_span,
        distinct_counterparties=len(counterparties),
        distinct_countries=len(countries),
        countries=countries,
        channels=channels,
        date_from=first,
        date_to=last,
        day_span=day_span,
    )
