"""
Profile editing for the signed-in user.

Only the common fields and the ones belonging to the user's role are sent;
empty inputs are stored as NULL. An optional avatar image is uploaded to
object storage before the row update and its object path is saved in
``profiles.avatar_url``.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any, Dict, Mapping, Optional, Tuple
import logging

from ..backend import BackendError, GENERIC_ERROR_MESSAGE
from ..roles import COMMON_PROFILE_FIELDS, role_profile_fields
from .auth_manager import AuthManager
from .form_manager import FormOutcome
from .validation_manager import validate_profile

logger = logging.getLogger(__name__)

ALLOWED_AVATAR_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")


@dataclass(frozen=True)
class AvatarUpload:
    filename: str
    content: bytes
    content_type: str

    @property
    def extension(self) -> str:
        suffix = PurePath(self.filename).suffix.lower().lstrip(".")
        return suffix or "png"


class ProfileForm:
    def __init__(self, auth: AuthManager, *, bucket: str = "avatars", max_avatar_bytes: int = 2 * 1024 * 1024):
        self.auth = auth
        self.bucket = bucket
        self.max_avatar_bytes = max_avatar_bytes
        self.saving = False

    def editable_fields(self) -> Tuple[str, ...]:
        role = self.auth.profile.role if self.auth.profile else None
        if role is None:
            return COMMON_PROFILE_FIELDS
        return COMMON_PROFILE_FIELDS + role_profile_fields(role)

    def initial_values(self) -> Dict[str, str]:
        profile = self.auth.profile
        if profile is None:
            return {key: "" for key in self.editable_fields()}
        values = profile.form_values()
        return {key: values.get(key, "") for key in self.editable_fields()}

    def check_avatar(self, avatar: AvatarUpload) -> Optional[str]:
        if len(avatar.content) > self.max_avatar_bytes:
            limit_mb = self.max_avatar_bytes / (1024 * 1024)
            return f"Avatar must be {limit_mb:g} MB or smaller"
        if avatar.content_type not in ALLOWED_AVATAR_TYPES:
            return "Avatar must be a PNG, JPEG, GIF or WebP image"
        return None

    async def save(self, values: Mapping[str, Any], avatar: Optional[AvatarUpload] = None) -> FormOutcome:
        user = self.auth.user
        if user is None:
            return FormOutcome(ok=False, message="You are not signed in")

        result = validate_profile(user.role, values)
        errors = result.field_errors()
        if avatar is not None:
            avatar_error = self.check_avatar(avatar)
            if avatar_error:
                errors["avatar"] = avatar_error
        if errors:
            return FormOutcome(ok=False, errors=errors)

        update: Dict[str, Any] = {}
        for key in self.editable_fields():
            value = str(values.get(key) or "").strip()
            update[key] = value or None

        self.saving = True
        try:
            if avatar is not None:
                path = f"{user.id}/avatar.{avatar.extension}"
                update["avatar_url"] = await self.auth.client.upload(
                    self.bucket, path, avatar.content, content_type=avatar.content_type, token=self.auth.access_token
                )
            update["updated_at"] = datetime.now(timezone.utc).isoformat()
            await self.auth.client.update("profiles", update, filters={"id": user.id}, token=self.auth.access_token)
            await self.auth.reload_profile()
        except BackendError as e:
            logger.error("Saving profile failed: %s", e.message)
            self.auth.notifier.error(e.message)
            return FormOutcome(ok=False, message=e.message)
        except Exception:
            logger.exception("Unexpected error saving profile")
            self.auth.notifier.error(GENERIC_ERROR_MESSAGE)
            return FormOutcome(ok=False, message=GENERIC_ERROR_MESSAGE)
        finally:
            self.saving = False

        self.auth.notifier.success("Profile updated")
        return FormOutcome(ok=True, message="Profile updated")

    async def load_avatar(self) -> Optional[bytes]:
        """Fetch the stored avatar image, None when unset or unavailable."""
        profile = self.auth.profile
        if profile is None or not profile.avatar_url:
            return None
        try:
            return await self.auth.client.download(self.bucket, profile.avatar_url, token=self.auth.access_token)
        except BackendError as e:
            logger.warning("Could not download avatar %s: %s", profile.avatar_url, e.message)
            return None
