"""Current-user persistence under the CURRENT_USER store key."""

import structlog
from pydantic import ValidationError

from edumind.models.user_profile import UserProfile
from edumind.storage.store import KeyValueStore, StoreKey

logger = structlog.get_logger()


def load_current_user(store: KeyValueStore) -> UserProfile | None:
    data = store.get(StoreKey.CURRENT_USER)
    if data is None:
        return None
    try:
        return UserProfile.model_validate(data)
    except ValidationError as e:
        logger.warning("current_user_unreadable", error=str(e))
        return None


def save_current_user(store: KeyValueStore, profile: UserProfile) -> None:
    store.set(StoreKey.CURRENT_USER, profile.model_dump(mode="json", by_alias=True))


def clear_current_user(store: KeyValueStore) -> None:
    """Forget the logged-in user. History collections are left in place."""
    store.remove(StoreKey.CURRENT_USER)
