"""
API Dependencies.

All service clients are built once per application from `Settings` and kept
on `app.state.container`; routes receive them through `Depends`.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
import structlog
from fastapi import Request
from sqlalchemy.engine import Engine

from agenda.application.services.account_service import AccountService
from agenda.application.services.auth_gate import AuthGate
from agenda.application.services.calendar import CalendarView
from agenda.application.services.clients_store import ClientsStore
from agenda.application.services.contact_import import ContactImporter
from agenda.application.services.profile_service import ProfileService
from agenda.application.services.schedule_service import ScheduleService
from agenda.application.services.schedules_store import SchedulesStore
from agenda.config import Settings
from agenda.infrastructure.address_book import AddressBook, FileAddressBook
from agenda.infrastructure.auth_provider import AuthProvider
from agenda.infrastructure.database import create_db_engine, create_session_factory, init_db
from agenda.infrastructure.document_store import SQLAlchemyDocumentStore
from agenda.infrastructure.image_host import CloudinaryClient
from agenda.infrastructure.secure_store import SecureStore

logger = structlog.get_logger(__name__)


@dataclass
class AgendaContainer:
    settings: Settings
    engine: Engine
    documents: SQLAlchemyDocumentStore
    auth: AuthProvider
    secure_store: SecureStore
    image_host: CloudinaryClient
    address_book: AddressBook
    gate: AuthGate
    clients: ClientsStore
    schedules: SchedulesStore
    calendar: CalendarView
    schedule_service: ScheduleService
    importer: ContactImporter
    accounts: AccountService
    profile: ProfileService

    def close(self) -> None:
        self.clients.close()
        self.schedules.close()
        self.gate.close()
        self.engine.dispose()


def build_container(
    settings: Settings,
    address_book: Optional[AddressBook] = None,
    image_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AgendaContainer:
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    session_factory = create_session_factory(engine)

    documents = SQLAlchemyDocumentStore(session_factory)
    auth = AuthProvider(session_factory, settings)
    secure_store = SecureStore(session_factory, settings.SECURE_STORE_KEY)
    image_host = CloudinaryClient(settings, transport=image_transport)
    address_book = address_book or FileAddressBook(settings.CONTACTS_FILE)

    clients = ClientsStore(auth, documents)
    schedules = SchedulesStore(auth, documents)
    calendar = CalendarView(settings.TIMEZONE)

    logger.info("Service container built", environment=settings.ENVIRONMENT)
    return AgendaContainer(
        settings=settings,
        engine=engine,
        documents=documents,
        auth=auth,
        secure_store=secure_store,
        image_host=image_host,
        address_book=address_book,
        gate=AuthGate(auth),
        clients=clients,
        schedules=schedules,
        calendar=calendar,
        schedule_service=ScheduleService(schedules, clients, calendar),
        importer=ContactImporter(address_book, clients),
        accounts=AccountService(auth, documents, secure_store),
        profile=ProfileService(auth, documents, image_host),
    )


def get_container(request: Request) -> AgendaContainer:
    return request.app.state.container
