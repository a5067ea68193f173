import pytest

from agenda.application.services.account_service import AccountService, refresh_token_key
from agenda.core.exceptions import AuthProviderError, ForbiddenException, ValidationException
from agenda.domain.schemas.auth import LoginRequest, ProfessionalCreate, SalonRegistrationRequest
from tests.conftest import PASSWORD, SALON_CNPJ, SALON_CPF


@pytest.fixture
def accounts(auth, documents, secure_store):
    return AccountService(auth, documents, secure_store)


def register(accounts, email, name="Ana", salon_document=SALON_CNPJ, salon_name="Salão Bela"):
    return accounts.register_professional(
        ProfessionalCreate(
            salon_name=salon_name,
            salon_document=salon_document,
            name=name,
            email=email,
            password=PASSWORD,
        )
    )


def test_start_salon_registration(accounts):
    draft = accounts.start_salon_registration(
        SalonRegistrationRequest(salon_name=" Salão Bela ", salon_document="11222333000181")
    )
    assert draft.salon_name == "Salão Bela"
    assert draft.salon_document == SALON_CNPJ
    assert draft.salon_id == "11222333000181"


def test_start_salon_registration_rejects_bad_document(accounts):
    with pytest.raises(ValidationException) as exc:
        accounts.start_salon_registration(SalonRegistrationRequest(salon_name="Salão", salon_document="123"))
    assert exc.value.message == "CPF ou CNPJ inválido."


def test_register_professional_creates_salon_and_profile(accounts, documents, auth, secure_store):
    user = register(accounts, "ana@example.com")

    assert auth.current_user.uid == user.uid
    assert user.display_name == "Ana"

    salon = documents.get("salons", "11222333000181")
    assert salon.get("ownerId") == user.uid
    assert salon.get("document") == SALON_CNPJ

    profile = documents.get("users", user.uid)
    assert profile.get("salonId") == "11222333000181"
    assert profile.get("email") == "ana@example.com"

    token = secure_store.get_item(refresh_token_key(user.uid))
    assert token and PASSWORD not in token


def test_second_professional_keeps_salon_owner(accounts, documents):
    owner = register(accounts, "ana@example.com")
    register(accounts, "bia@example.com", name="Bia", salon_name="Outro nome")

    salon = documents.get("salons", "11222333000181")
    assert salon.get("ownerId") == owner.uid
    assert salon.get("name") == "Salão Bela"


def test_register_requires_salon_data(accounts):
    with pytest.raises(ValidationException) as exc:
        register(accounts, "ana@example.com", salon_document="", salon_name="")
    assert exc.value.message.startswith("Dados do salão não encontrados")


def test_register_maps_provider_errors(accounts):
    register(accounts, "ana@example.com")
    with pytest.raises(AuthProviderError) as exc:
        register(accounts, "ana@example.com")
    assert exc.value.code == "email-already-in-use"
    assert exc.value.message == "Este e-mail já está em uso."


def test_login(accounts, auth):
    user = register(accounts, "ana@example.com")
    accounts.logout()
    assert auth.current_user is None

    assert accounts.login(LoginRequest(document=SALON_CNPJ, email="ana@example.com", password=PASSWORD)).uid == user.uid


@pytest.mark.parametrize(
    "document,email,password,message",
    [
        ("", "ana@example.com", PASSWORD, "Por favor, preencha todos os campos."),
        ("123", "ana@example.com", PASSWORD, "CNPJ/CPF do estabelecimento inválido."),
        (SALON_CNPJ, "ana@example.com", "errada", "Senha incorreta."),
        (SALON_CNPJ, "bia@example.com", PASSWORD, "Usuário não encontrado."),
        (SALON_CNPJ, "ana", PASSWORD, "E-mail inválido."),
    ],
)
def test_login_errors(accounts, auth, document, email, password, message):
    register(accounts, "ana@example.com")
    accounts.logout()
    with pytest.raises((ValidationException, AuthProviderError)) as exc:
        accounts.login(LoginRequest(document=document, email=email, password=password))
    assert exc.value.message == message
    assert auth.current_user is None


def test_login_into_another_salon_is_refused(accounts, auth):
    register(accounts, "ana@example.com")
    accounts.logout()

    with pytest.raises(ForbiddenException) as exc:
        accounts.login(LoginRequest(document=SALON_CPF, email="ana@example.com", password=PASSWORD))
    assert exc.value.message == "Este usuário não pertence ao estabelecimento informado."
    assert auth.current_user is None


def test_current_salon(accounts):
    register(accounts, "ana@example.com")
    salon = accounts.current_salon()
    assert salon.id == "11222333000181"
    assert salon.name == "Salão Bela"
    assert salon.can_register_professional


def test_register_colleague_disabled_without_salon(accounts, auth):
    auth.sign_up("solo@example.com", PASSWORD)
    assert not accounts.current_salon().can_register_professional
    assert accounts.register_colleague("Bia", "bia@example.com", PASSWORD) is None


def test_register_colleague_joins_current_salon(accounts, documents):
    register(accounts, "ana@example.com")
    colleague = accounts.register_colleague("Bia", "bia@example.com", PASSWORD)
    assert documents.get("users", colleague.uid).get("salonId") == "11222333000181"


def test_list_professionals_of_current_salon(accounts):
    ana = register(accounts, "ana@example.com")
    register(accounts, "bia@example.com", name="Bia")
    register(accounts, "caio@example.com", name="Caio", salon_document=SALON_CPF)
    assert [p.name for p in accounts.list_professionals()] == ["Caio"]

    accounts.switch_account(ana.uid)
    assert sorted(p.name for p in accounts.list_professionals()) == ["Ana", "Bia"]


def test_switch_account(accounts, auth):
    ana = register(accounts, "ana@example.com")
    bia = register(accounts, "bia@example.com", name="Bia")
    assert auth.current_user.uid == bia.uid

    result = accounts.switch_account(ana.uid)
    assert result.status == "switched"
    assert auth.current_user.uid == ana.uid

    assert accounts.switch_account(ana.uid).status == "unchanged"


def test_switch_without_stored_token_requires_login(accounts, auth):
    register(accounts, "ana@example.com")
    result = accounts.switch_account("unknown-uid")
    assert result.status == "login_required"
    assert auth.current_user is None


def test_switch_with_stale_token_requires_login(accounts, auth, secure_store):
    ana = register(accounts, "ana@example.com")
    register(accounts, "bia@example.com", name="Bia")

    code = auth.send_password_reset("ana@example.com")
    accounts.confirm_password_reset(code, "nova-senha")

    assert accounts.switch_account(ana.uid).status == "login_required"
    assert secure_store.get_item(refresh_token_key(ana.uid)) is None


def test_password_reset_messages(accounts):
    with pytest.raises(ValidationException):
        accounts.send_password_reset(" ")
    with pytest.raises(AuthProviderError) as exc:
        accounts.send_password_reset("ninguem@example.com")
    assert exc.value.message == "Nenhuma conta encontrada com este e-mail."
