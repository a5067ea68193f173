"""Account service — login, salon/professional registration, password reset and account switching.

Account switching keeps one provider-issued refresh token per account in the
secure store (key `refresh_token_<uid>`); passwords are never stored.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from agenda.application.services.tax_document import (
    format_cpf_cnpj,
    salon_id_from_document,
    validate_cpf_cnpj,
)
from agenda.core.exceptions import AuthProviderError, ForbiddenException, ValidationException
from agenda.domain.repositories.base import DocumentStore
from agenda.domain.schemas.auth import (
    AuthUser,
    LoginRequest,
    ProfessionalCreate,
    ProfessionalRead,
    SalonDraft,
    SalonRead,
    SalonRegistrationRequest,
    SwitchAccountResult,
)
from agenda.infrastructure.auth_provider import AuthProvider
from agenda.infrastructure.secure_store import SecureStore

logger = structlog.get_logger(__name__)

USERS = "users"
SALONS = "salons"

LOGIN_ERRORS = {
    "invalid-email": "E-mail inválido.",
    "user-not-found": "Usuário não encontrado.",
    "wrong-password": "Senha incorreta.",
    "invalid-credential": "Credenciais inválidas.",
}
SIGN_UP_ERRORS = {
    "email-already-in-use": "Este e-mail já está em uso.",
    "invalid-email": "E-mail inválido.",
    "weak-password": "A senha deve ter pelo menos 6 caracteres.",
}
RESET_ERRORS = {
    "invalid-email": "E-mail inválido.",
    "user-not-found": "Nenhuma conta encontrada com este e-mail.",
    "invalid-action-code": "Link de redefinição inválido ou expirado.",
    "weak-password": "A senha deve ter pelo menos 6 caracteres.",
}


def friendly_error(error: AuthProviderError, messages: Dict[str, str], fallback: str) -> AuthProviderError:
    return AuthProviderError(error.code, messages.get(error.code, fallback))


def refresh_token_key(uid: str) -> str:
    return f"refresh_token_{uid}"


def _required(*values: Optional[str]) -> bool:
    return all(v is not None and v.strip() for v in values)


class AccountService:
    def __init__(self, auth: AuthProvider, documents: DocumentStore, secure_store: SecureStore):
        self.auth = auth
        self.documents = documents
        self.secure_store = secure_store

    def _remember(self, user: AuthUser) -> None:
        self.secure_store.set_item(refresh_token_key(user.uid), self.auth.issue_refresh_token())

    def _profile(self, uid: str) -> Optional[dict]:
        doc = self.documents.get(USERS, uid)
        return doc.data if doc else None

    # --- login / logout --------------------------------------------------

    def login(self, body: LoginRequest) -> AuthUser:
        if not _required(body.document, body.email, body.password):
            raise ValidationException("Por favor, preencha todos os campos.")
        if not validate_cpf_cnpj(body.document):
            raise ValidationException("CNPJ/CPF do estabelecimento inválido.")

        try:
            user = self.auth.sign_in(body.email, body.password)
        except AuthProviderError as e:
            raise friendly_error(e, LOGIN_ERRORS, "Não foi possível fazer login.") from e

        profile = self._profile(user.uid)
        if profile is not None and profile.get("salonId") != salon_id_from_document(body.document):
            self.auth.sign_out()
            raise ForbiddenException("Este usuário não pertence ao estabelecimento informado.")

        self._remember(user)
        return user

    def logout(self) -> None:
        self.auth.sign_out()

    # --- registration ----------------------------------------------------

    def start_salon_registration(self, body: SalonRegistrationRequest) -> SalonDraft:
        if not _required(body.salon_name, body.salon_document):
            raise ValidationException("Por favor, preencha todos os campos.")
        if not validate_cpf_cnpj(body.salon_document):
            raise ValidationException("CPF ou CNPJ inválido.")
        return SalonDraft(
            salon_name=body.salon_name.strip(),
            salon_document=format_cpf_cnpj(body.salon_document),
            salon_id=salon_id_from_document(body.salon_document),
        )

    def register_professional(self, body: ProfessionalCreate) -> AuthUser:
        if not _required(body.name, body.email, body.password):
            raise ValidationException("Por favor, preencha todos os campos.")
        if not _required(body.salon_name, body.salon_document):
            raise ValidationException(
                "Dados do salão não encontrados. Por favor, volte e preencha os dados do salão."
            )
        if not validate_cpf_cnpj(body.salon_document):
            raise ValidationException("CPF ou CNPJ inválido.")

        try:
            user = self.auth.sign_up(body.email, body.password)
        except AuthProviderError as e:
            raise friendly_error(e, SIGN_UP_ERRORS, "Não foi possível criar a conta.") from e

        name = body.name.strip()
        user = self.auth.update_profile(display_name=name)
        now = datetime.now(timezone.utc).isoformat()
        salon_id = salon_id_from_document(body.salon_document)

        # The first professional creates the salon; later ones attach to it
        if self.documents.get(SALONS, salon_id) is None:
            self.documents.set(
                SALONS,
                salon_id,
                {
                    "name": body.salon_name.strip(),
                    "document": format_cpf_cnpj(body.salon_document),
                    "ownerId": user.uid,
                    "createdAt": now,
                },
            )

        self.documents.set(
            USERS,
            user.uid,
            {
                "uid": user.uid,
                "name": name,
                "email": user.email,
                "salonId": salon_id,
                "salonName": body.salon_name.strip(),
                "createdAt": now,
            },
        )
        self._remember(user)
        logger.info("Professional registered", uid=user.uid, salon_id=salon_id)
        return user

    def current_salon(self) -> SalonRead:
        user = self.auth.current_user
        profile = (self._profile(user.uid) if user else None) or {}
        salon_id = profile.get("salonId") or ""
        name = profile.get("salonName") or ""
        document = ""

        if salon_id:
            salon = self.documents.get(SALONS, salon_id)
            if salon is not None:
                name = salon.get("name") or name
                document = salon.get("document") or ""

        return SalonRead(
            id=salon_id,
            name=name,
            document=document,
            can_register_professional=bool(name and document),
        )

    def register_colleague(self, name: str, email: str, password: str) -> Optional[AuthUser]:
        """Register a professional into the current user's salon. Disabled (None) when the salon is not resolved."""
        salon = self.current_salon()
        if not salon.can_register_professional:
            logger.info("Professional registration unavailable: salon data incomplete", salon_id=salon.id)
            return None
        return self.register_professional(
            ProfessionalCreate(
                salon_name=salon.name,
                salon_document=salon.document,
                name=name,
                email=email,
                password=password,
            )
        )

    def list_professionals(self) -> List[ProfessionalRead]:
        """Accounts of the current salon (all accounts when the salon is unknown)."""
        user = self.auth.current_user
        profile = (self._profile(user.uid) if user else None) or {}
        salon_id = profile.get("salonId")
        docs = self.documents.query(USERS, salonId=salon_id) if salon_id else self.documents.query(USERS)
        return [
            ProfessionalRead(
                uid=doc.get("uid") or doc.id,
                name=doc.get("name") or "Sem nome",
                email=doc.get("email") or "",
                phone=doc.get("phone") or "",
                photo_url=doc.get("photoURL"),
            )
            for doc in docs
        ]

    # --- account switching -----------------------------------------------

    def switch_account(self, uid: str) -> SwitchAccountResult:
        current = self.auth.current_user
        if current is not None and current.uid == uid:
            return SwitchAccountResult(status="unchanged", user=current)

        key = refresh_token_key(uid)
        token = self.secure_store.get_item(key)
        self.auth.sign_out()
        if not token:
            return SwitchAccountResult(status="login_required")

        try:
            user = self.auth.sign_in_with_refresh_token(token)
        except AuthProviderError as e:
            logger.warning("Account switch failed", uid=uid, code=e.code)
            if e.code == "invalid-credential":
                self.secure_store.delete_item(key)
            return SwitchAccountResult(status="login_required")

        self._remember(user)
        return SwitchAccountResult(status="switched", user=user)

    # --- password reset --------------------------------------------------

    def send_password_reset(self, email: str) -> None:
        if not _required(email):
            raise ValidationException("Informe seu e-mail.")
        try:
            self.auth.send_password_reset(email.strip())
        except AuthProviderError as e:
            raise friendly_error(e, RESET_ERRORS, "Não foi possível enviar o e-mail de recuperação.") from e

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        try:
            self.auth.confirm_password_reset(token, new_password)
        except AuthProviderError as e:
            raise friendly_error(e, RESET_ERRORS, "Não foi possível redefinir a senha.") from e
