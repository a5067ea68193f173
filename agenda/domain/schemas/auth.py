"""Pydantic schemas for sessions, accounts and salons."""

from typing import Literal, Optional

from pydantic import BaseModel


class AuthUser(BaseModel):
    uid: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    model_config = {"frozen": True}


class LoginRequest(BaseModel):
    document: str
    email: str
    password: str


class SalonRegistrationRequest(BaseModel):
    salon_name: str
    salon_document: str


class SalonDraft(BaseModel):
    salon_name: str
    salon_document: str  # formatted
    salon_id: str  # digits only


class ProfessionalCreate(BaseModel):
    salon_name: str
    salon_document: str
    name: str
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str


class SwitchAccountRequest(BaseModel):
    uid: str


class SwitchAccountResult(BaseModel):
    status: Literal["switched", "unchanged", "login_required"]
    user: Optional[AuthUser] = None
    access_token: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AuthUser


class ProfessionalRead(BaseModel):
    uid: str
    name: str
    email: str
    phone: str = ""
    photo_url: Optional[str] = None


class SalonRead(BaseModel):
    id: str
    name: str
    document: str
    can_register_professional: bool


class ProfileUpdate(BaseModel):
    display_name: str


class SessionRead(BaseModel):
    authenticated: bool
    area: Literal["public", "protected"]
    user: Optional[AuthUser] = None
    route: Optional[str] = None  # where a requested route lands for this session


class ColleagueCreate(BaseModel):
    name: str
    email: str
    password: str
