# yoda_events/utils/user_listener.py
import logging
from functools import lru_cache

from sqlalchemy import event

from yoda_events.models.users import User
from yoda_events.utils.hashing import EncoderFactory, get_encoder_factory

logger = logging.getLogger(__name__)

_HOOKS = ("before_insert", "before_update")


# Hashes User.plain_password into User.password right before the row is
# written. Registered on the User mapper only.
class UserPasswordListener:
    def __init__(self, encoder_factory: EncoderFactory):
        self.encoder_factory = encoder_factory

    def register(self) -> None:
        for identifier in _HOOKS:
            if not event.contains(User, identifier, self._on_flush):
                event.listen(User, identifier, self._on_flush, propagate=True)

    def unregister(self) -> None:
        for identifier in _HOOKS:
            if event.contains(User, identifier, self._on_flush):
                event.remove(User, identifier, self._on_flush)

    def _on_flush(self, mapper, connection, target: User) -> None:
        self.handle_user(target)

    def handle_user(self, user: User) -> None:
        plain_password = user.plain_password
        if not plain_password:
            return

        # EncoderNotFoundError propagates and aborts the flush
        encoder = self.encoder_factory.get_encoder(user)
        user.password = encoder.encode_password(plain_password, user.get_salt())
        user.erase_credentials()
        logger.debug("Encoded password for user %s", user.username)


@lru_cache
def get_password_listener() -> UserPasswordListener:
    return UserPasswordListener(get_encoder_factory())
