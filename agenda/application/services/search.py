"""Search/filter — accent-insensitive name matching and digit-sequence phone matching."""

import re
import unicodedata
from typing import Iterable, List

from agenda.domain.schemas.client import Client

NON_DIGIT_RE = re.compile(r"\D")


def normalize(value: str) -> str:
    """Lowercase, decompose and drop combining marks: "José" -> "jose". Idempotent."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def only_digits(value: str) -> str:
    return NON_DIGIT_RE.sub("", value or "")


def client_matches(client: Client, query: str) -> bool:
    raw = (query or "").strip()
    q = normalize(raw)
    digits = only_digits(raw)
    if not q and not digits:
        return True

    name_ok = bool(q) and q in normalize(client.name)
    phone_ok = bool(digits) and digits in only_digits(client.phone)
    return name_ok or phone_ok


def filter_clients(clients: Iterable[Client], query: str) -> List[Client]:
    """Clients whose name contains the query, or whose phone digits contain the query's digits."""
    return [c for c in clients if client_matches(c, query)]
