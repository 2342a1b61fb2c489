from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import PushToken, User, UserProfile
from app.notifications.preferences import NotificationPreferences
from app.services.errors import UserNotFoundError


class NotificationProfileService:
    def get_account(self, session: Session, *, user_id: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def load_preferences(
        self, session: Session, *, user_id: str
    ) -> NotificationPreferences:
        profile = session.get(UserProfile, user_id)
        if profile is None or not isinstance(profile.preferences, dict):
            return NotificationPreferences()
        return NotificationPreferences.from_blob(profile.preferences.get("notifications"))

    def list_active_push_tokens(self, session: Session, *, user_id: str) -> list[str]:
        stmt = (
            select(PushToken.token)
            .where(PushToken.user_id == user_id, PushToken.is_active.is_(True))
            .order_by(PushToken.created_at.asc())
        )
        return list(session.scalars(stmt).all())

    def resolve_email(self, user: User) -> str | None:
        email = user.email.strip() if isinstance(user.email, str) else ""
        return email or None
