"""Profile API routes — avatar upload and display name."""

import os
import uuid

from fastapi import APIRouter, Depends, File, UploadFile

from agenda.core.exceptions import ValidationException
from agenda.domain.schemas.auth import AuthUser, ProfileUpdate
from agenda.interfaces.api.deps import get_current_user
from agenda.interfaces.deps import AgendaContainer, get_container

router = APIRouter(prefix="/api/profile", tags=["Profile"])

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "heic")


@router.get("", response_model=AuthUser)
def get_profile(user: AuthUser = Depends(get_current_user)):
    return user


@router.put("", response_model=AuthUser)
def update_profile(
    body: ProfileUpdate,
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    return container.profile.update_display_name(body.display_name)


@router.post("/avatar", response_model=AuthUser)
async def upload_avatar(
    file: UploadFile = File(...),
    container: AgendaContainer = Depends(get_container),
    user: AuthUser = Depends(get_current_user),
):
    if not file.filename:
        raise ValidationException("Arquivo não informado")

    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if ext not in IMAGE_EXTENSIONS:
        raise ValidationException("Apenas imagens .jpg, .png, .webp e .heic são aceitas")

    # Stage the picked image locally, as the device would
    upload_dir = container.settings.UPLOAD_DIR
    os.makedirs(upload_dir, exist_ok=True)
    file_path = os.path.join(upload_dir, f"{uuid.uuid4().hex}.{ext}")

    with open(file_path, "wb") as f:
        f.write(await file.read())

    try:
        return await container.profile.change_avatar(file_path)
    finally:
        os.remove(file_path)
