"""Explicit per-store session context: who is logged in and their progress."""

import secrets
import string

import structlog

from edumind.assessment.aggregator import (
    STRONG_TOPIC_THRESHOLD,
    WEAK_TOPIC_THRESHOLD,
    apply_quiz_result,
)
from edumind.errors import InputValidationError
from edumind.models.user_profile import UserProfile
from edumind.storage.store import KeyValueStore
from edumind.storage.user_profile import (
    clear_current_user,
    load_current_user,
    save_current_user,
)

logger = structlog.get_logger()

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _fabricate_user_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


class StudySession:
    """Holds the store and the current user for one browser profile.

    Login is a mock: any non-empty email and password yields a fresh user
    with an empty performance profile.

    Args:
        store: Key-value store shared with the history collections.
        weak_below: Scores under this mark a topic weak.
        strong_at: Scores at or over this clear a weak topic.
    """

    def __init__(
        self,
        store: KeyValueStore,
        weak_below: float = WEAK_TOPIC_THRESHOLD,
        strong_at: float = STRONG_TOPIC_THRESHOLD,
    ):
        self.store = store
        self.weak_below = weak_below
        self.strong_at = strong_at
        self.user: UserProfile | None = load_current_user(store)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def login(self, email: str, password: str, name: str | None = None) -> UserProfile:
        """Fabricate and persist a user; `name` defaults to the email's local part."""
        email = (email or "").strip()
        if not email or not password:
            raise InputValidationError("Please fill in all fields")
        if name is not None and not name.strip():
            raise InputValidationError("Please fill in all fields")

        self.user = UserProfile(
            id=_fabricate_user_id(),
            name=name.strip() if name else email.split("@")[0],
            email=email,
        )
        save_current_user(self.store, self.user)
        logger.info("user_logged_in", user_id=self.user.id)
        return self.user

    def logout(self) -> None:
        if self.user is not None:
            logger.info("user_logged_out", user_id=self.user.id)
        self.user = None
        clear_current_user(self.store)

    def record_quiz_result(self, score: float, topic: str) -> UserProfile | None:
        """Fold a finished quiz into the user's progress and persist it.

        Does nothing when no user is logged in.
        """
        if self.user is None:
            logger.info("quiz_result_not_recorded", reason="no_user", topic=topic)
            return None

        progress = apply_quiz_result(
            self.user.progress,
            score,
            topic,
            weak_below=self.weak_below,
            strong_at=self.strong_at,
        )
        self.user = self.user.model_copy(update={"progress": progress})
        save_current_user(self.store, self.user)
        logger.info(
            "progress_updated",
            user_id=self.user.id,
            total_quizzes=progress.total_quizzes,
            average_score=round(progress.average_score, 1),
            weak_topics=progress.weak_topics,
        )
        return self.user
