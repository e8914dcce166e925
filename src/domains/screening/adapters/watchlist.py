"""In-memory watchlist adapter (sanctions / PEP style lists).

Names are normalized (accents stripped, punctuation dropped, tokens sorted)
and compared with difflib, so word order and diacritics do not matter.
Wallet subjects match only on exact address.
"""

import json
import re
import unicodedata
from difflib import SequenceMatcher
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, TypeAdapter

from src.domains.scoring.models import Finding, Severity

from ..config import MatchPolicy
from ..models import Subject, SubjectKind
from .base import SourceAdapter

logger = structlog.get_logger()

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


class WatchlistEntry(BaseModel):
    entry_id: str
    name: str
    aliases: list[str] = Field(default_factory=list)
    wallet_addresses: list[str] = Field(default_factory=list)
    programs: list[str] = Field(default_factory=list)


_ENTRIES = TypeAdapter(list[WatchlistEntry])


def normalize_name(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    tokens = _NON_ALNUM.sub(" ", ascii_only.lower()).split()
    return " ".join(sorted(tokens))


def name_similarity(a: str, b: str) -> float:
    left, right = normalize_name(a), normalize_name(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return SequenceMatcher(None, left, right).ratio()


def _address_key(address: str) -> str:
    # Hex addresses are case-insensitive; base58/bech32 are not
    return address.lower() if address.lower().startswith("0x") else address


def load_watchlist(path: str | Path) -> list[WatchlistEntry]:
    """Load entries from a JSON file: a list, or an object with an ``entries`` list."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("entries", [])
    entries = _ENTRIES.validate_python(raw)
    logger.info("watchlist_loaded", path=str(path), entries=len(entries))
    return entries


class WatchlistAdapter(SourceAdapter):
    def __init__(
        self,
        name: str,
        category: str,
        entries: list[WatchlistEntry],
        policy: MatchPolicy | None = None,
        supported_kinds: frozenset[SubjectKind] | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        self.name = name
        self.category = category
        self._entries = list(entries)
        self._policy = policy or MatchPolicy()
        self._addresses = {
            _address_key(address): entry
            for entry in self._entries
            for address in entry.wallet_addresses
        }
        if supported_kinds is not None:
            self.supported_kinds = supported_kinds
        elif self._addresses:
            self.supported_kinds = frozenset(SubjectKind)
        self.timeout_ms = timeout_ms

    @property
    def size(self) -> int:
        return len(self._entries)

    def best_match(self, name: str) -> tuple[WatchlistEntry | None, float, str]:
        """Highest-confidence entry for a name, with the matched name or alias."""
        best: tuple[WatchlistEntry | None, float, str] = (None, 0.0, "")
        for entry in self._entries:
            for candidate in (entry.name, *entry.aliases):
                confidence = name_similarity(name, candidate)
                if confidence > best[1]:
                    best = (entry, confidence, candidate)
        return best

    async def screen(self, subject: Subject) -> Finding:
        policy = self._policy

        if subject.is_wallet:
            entry = self._addresses.get(_address_key(subject.wallet_address))
            if entry is None:
                return self._clear(f"Address not on {self.name}")
            return self._finding(
                Severity.CRITICAL,
                policy.wallet_match_score,
                f"Address listed on {self.name}: {entry.name}",
                [entry.entry_id],
            )

        entry, confidence, matched = self.best_match(subject.name)
        if entry is None or confidence < policy.possible_confidence:
            return self._clear(f"No match on {self.name}")

        programs = f" ({', '.join(entry.programs)})" if entry.programs else ""
        if confidence >= policy.strong_confidence:
            return self._finding(
                Severity.CRITICAL,
                policy.strong_score,
                f'{self.name} match: "{matched}" ({confidence:.0%}){programs}',
                [entry.entry_id],
            )
        return self._finding(
            Severity.HIGH,
            policy.possible_score,
            f'Possible {self.name} match: "{matched}" ({confidence:.0%})',
            [entry.entry_id],
        )
