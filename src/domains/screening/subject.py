"""Subject parsing and wallet address detection."""

import re
import unicodedata

from .errors import InvalidSubjectError
from .models import Subject, SubjectKind

MAX_NAME_LENGTH = 512

# Checked in order; the first match wins
_WALLET_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("ETH", re.compile(r"^0x[a-fA-F0-9]{40}$")),
    ("BTC", re.compile(r"^bc1[a-zA-HJ-NP-Z0-9]{25,90}$")),
    ("BTC", re.compile(r"^[13][a-km-zA-HJ-NP-Z1-9]{25,34}$")),
    ("TRON", re.compile(r"^T[a-zA-Z0-9]{33}$")),
    ("XRP", re.compile(r"^r[0-9a-zA-Z]{24,34}$")),
    ("SOL", re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")),
]


def detect_wallet(text: str) -> tuple[str, str] | None:
    """Return (address, chain) when ``text`` looks like a wallet address."""
    candidate = text.strip()
    for chain, pattern in _WALLET_PATTERNS:
        if pattern.match(candidate):
            return candidate, chain
    return None


def _clean_name(raw: str) -> str:
    name = " ".join(raw.split())
    if not name:
        raise InvalidSubjectError("Subject name is empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidSubjectError(f"Subject name exceeds {MAX_NAME_LENGTH} characters")
    if any(unicodedata.category(ch) == "Cc" and not ch.isspace() for ch in raw):
        raise InvalidSubjectError("Subject name contains control characters")
    return name


def parse_subject(query: str | None, kind: SubjectKind | str | None = None) -> Subject:
    """Classify a raw query as a wallet or a name.

    Without an explicit kind, wallet-shaped input becomes a WALLET subject and
    anything else an INDIVIDUAL. An explicit INDIVIDUAL or ENTITY is always
    treated as a name; an explicit WALLET must parse as an address.
    """
    if query is None or not isinstance(query, str):
        raise InvalidSubjectError("Subject query must be a string")

    try:
        requested = SubjectKind(kind.upper()) if isinstance(kind, str) else kind
    except ValueError as exc:
        raise InvalidSubjectError(f"Unknown subject kind {kind!r}") from exc

    if requested in (None, SubjectKind.WALLET):
        wallet = detect_wallet(query)
        if wallet is not None:
            address, chain = wallet
            return Subject(kind=SubjectKind.WALLET, wallet_address=address, chain=chain)
        if requested == SubjectKind.WALLET:
            raise InvalidSubjectError(f"Unrecognized wallet address {query.strip()!r}")

    return Subject(kind=requested or SubjectKind.INDIVIDUAL, name=_clean_name(query))
