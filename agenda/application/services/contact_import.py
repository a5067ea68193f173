"""Contact import service.

Handles:
- Address book permission and empty-book checks
- Flattening contacts into one candidate per phone number
- Dropping nameless candidates and phones with fewer than 8 digits
- De-duplicating by digit-only phone (first occurrence wins)
- Skipping phones already registered for the tenant
- One batched insert with locally generated ids
"""

import random
import string
import time
from typing import Iterable, List, Optional, Set

import structlog

from agenda.application.services.clients_store import ClientsStore
from agenda.application.services.search import only_digits
from agenda.domain.schemas.contact import ContactCandidate, DeviceContact, ImportResult
from agenda.infrastructure.address_book import AddressBook

logger = structlog.get_logger(__name__)

MIN_PHONE_DIGITS = 8
BASE36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(BASE36[r])
    return "".join(reversed(out))


class LocalIdFactory:
    """'<base36 ms timestamp>-<8 random base36 chars>', never repeated by the same factory."""

    def __init__(self):
        self._prefix: Optional[str] = None
        self._issued: Set[str] = set()

    def __call__(self) -> str:
        prefix = _base36(int(time.time() * 1000))
        # Ids from an older millisecond can never collide with new ones
        if prefix != self._prefix:
            self._prefix = prefix
            self._issued.clear()
        while True:
            local_id = f"{prefix}-{''.join(random.choices(BASE36, k=8))}"
            if local_id not in self._issued:
                self._issued.add(local_id)
                return local_id


def build_candidates(contacts: Iterable[DeviceContact]) -> List[ContactCandidate]:
    candidates = []
    for contact in contacts:
        name = (contact.name or "").strip()
        if not name:
            continue
        for number in contact.phone_numbers:
            digits = only_digits(number)
            if len(digits) >= MIN_PHONE_DIGITS:
                candidates.append(ContactCandidate(name=name, phone=digits))
    return candidates


def dedupe_by_phone(candidates: Iterable[ContactCandidate]) -> List[ContactCandidate]:
    by_phone = {}
    for c in candidates:
        by_phone.setdefault(c.phone, c)
    return list(by_phone.values())


def exclude_existing(candidates: Iterable[ContactCandidate], existing_phones: Iterable[str]) -> List[ContactCandidate]:
    existing = {only_digits(p) for p in existing_phones}
    return [c for c in candidates if c.phone not in existing]


class ContactImporter:
    def __init__(self, address_book: AddressBook, clients: ClientsStore, id_factory: Optional[LocalIdFactory] = None):
        self.address_book = address_book
        self.clients = clients
        self.new_id = id_factory or LocalIdFactory()

    def _insert(self, payload: List[dict]) -> int:
        add_many = getattr(self.clients, "add_many", None)
        if callable(add_many):
            return len(add_many(payload))
        return sum(1 for item in payload if self.clients.add(item) is not None)

    def import_contacts(self) -> ImportResult:
        try:
            if self.address_book.request_permission() != "granted":
                return ImportResult(
                    status="permission_denied",
                    title="Permissão negada",
                    message="Habilite o acesso aos contatos nas configurações.",
                )

            contacts = self.address_book.get_contacts()
            if not contacts:
                return ImportResult(status="empty", title="Sem contatos", message="Nenhum contato encontrado.")

            unique = dedupe_by_phone(build_candidates(contacts))
            to_insert = exclude_existing(unique, (c.phone for c in self.clients.snapshot))
            if not to_insert:
                return ImportResult(
                    status="nothing_to_import", title="Nada para importar", message="Todos já cadastrados."
                )

            payload = [{"id": self.new_id(), "name": c.name, "phone": c.phone} for c in to_insert]
            imported = self._insert(payload)
            if imported == 0:
                logger.warning("Contact import wrote nothing", candidates=len(payload))
                return ImportResult(status="failed", title="Erro ao importar", message="Tente novamente.")

            logger.info("Contacts imported", imported=imported, candidates=len(unique))
            return ImportResult(
                status="imported",
                imported=imported,
                title="Importação concluída",
                message=f"Importados {imported} contato(s).",
            )
        except Exception:
            logger.exception("Contact import failed")
            return ImportResult(status="failed", title="Erro ao importar", message="Tente novamente.")
