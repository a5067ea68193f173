import pytest

from agenda.config import Settings
from agenda.domain.schemas.contact import DeviceContact
from agenda.infrastructure.auth_provider import AuthProvider
from agenda.infrastructure.database import create_db_engine, create_session_factory, init_db
from agenda.infrastructure.document_store import SQLAlchemyDocumentStore
from agenda.infrastructure.secure_store import SecureStore

PASSWORD = "segredo123"
SALON_CPF = "529.982.247-25"
SALON_CNPJ = "11.222.333/0001-81"


class FakeAddressBook:
    def __init__(self, contacts=None, permission="granted", error=None):
        self.contacts = contacts or []
        self.permission = permission
        self.error = error

    def request_permission(self):
        return self.permission

    def get_contacts(self):
        if self.error is not None:
            raise self.error
        return [DeviceContact(name=name, phone_numbers=phones) for name, phones in self.contacts]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        SECURE_STORE_KEY="test-store-key",
        CLOUDINARY_CLOUD_NAME="demo",
        CONTACTS_FILE=str(tmp_path / "contacts.csv"),
        UPLOAD_DIR=str(tmp_path / "uploads"),
        ENVIRONMENT="test",
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def documents(session_factory):
    return SQLAlchemyDocumentStore(session_factory)


@pytest.fixture
def auth(session_factory, settings):
    return AuthProvider(session_factory, settings)


@pytest.fixture
def secure_store(session_factory, settings):
    return SecureStore(session_factory, settings.SECURE_STORE_KEY)


@pytest.fixture
def sign_up_professional(auth, documents):
    """Create an account, sign it in and write its profile for `salon_id`."""

    def _sign_up(email, salon_id="52998224725", name="Ana"):
        user = auth.sign_up(email, PASSWORD)
        documents.set("users", user.uid, {"uid": user.uid, "name": name, "email": user.email, "salonId": salon_id})
        return user

    return _sign_up
