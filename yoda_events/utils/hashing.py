# yoda_events/utils/hashing.py
"""
Password encoders and the factory that picks one per account.

An encoder turns (plain password, salt) into the string stored in
``User.password`` and later checks a login attempt against it. The factory
maps an account class name to an algorithm name (see
``settings.PASSWORD_ENCODERS``) and fails loudly when no encoder fits, so a
misconfigured deployment never ends up storing plaintext.
"""
import logging
from functools import lru_cache
from typing import Dict, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from yoda_events.config import settings

logger = logging.getLogger(__name__)


class EncoderNotFoundError(RuntimeError):
    pass


class PasswordEncoder:
    def encode_password(self, raw: str, salt: Optional[str]) -> str:
        raise NotImplementedError

    def is_password_valid(self, encoded: str, raw: str, salt: Optional[str]) -> bool:
        raise NotImplementedError

    def needs_rehash(self, encoded: str) -> bool:
        return False


class Argon2PasswordEncoder(PasswordEncoder):
    """argon2id via argon2-cffi.

    Without an explicit salt a random one is generated for every hash and
    embedded in the result. With a salt the output is deterministic.
    Explicit salts must be at least ``MIN_SALT_LENGTH`` bytes (UTF-8).
    """

    MIN_SALT_LENGTH = 8

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536):
        self._hasher = PasswordHasher(time_cost=time_cost, memory_cost=memory_cost)

    def encode_password(self, raw: str, salt: Optional[str] = None) -> str:
        if salt:
            salt_bytes = salt.encode("utf-8")
            if len(salt_bytes) < self.MIN_SALT_LENGTH:
                raise ValueError(f"Salt must be at least {self.MIN_SALT_LENGTH} bytes long.")
            return self._hasher.hash(raw, salt=salt_bytes)
        return self._hasher.hash(raw)

    def is_password_valid(self, encoded: str, raw: str, salt: Optional[str] = None) -> bool:
        if not encoded or raw is None:
            return False
        try:
            return self._hasher.verify(encoded, raw)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            logger.warning("Stored password hash could not be verified")
            return False

    def needs_rehash(self, encoded: str) -> bool:
        try:
            return self._hasher.check_needs_rehash(encoded)
        except InvalidHashError:
            return True


ENCODER_CLASSES = {
    "argon2": Argon2PasswordEncoder,
}


class EncoderFactory:
    def __init__(self, encoders: Dict[str, str], time_cost: int = 3, memory_cost: int = 65536):
        self._encoders = dict(encoders)
        self._time_cost = time_cost
        self._memory_cost = memory_cost
        self._cache: Dict[str, PasswordEncoder] = {}

    def get_encoder(self, user) -> PasswordEncoder:
        account = type(user).__name__
        algorithm = self._encoders.get(account)
        if algorithm is None:
            raise EncoderNotFoundError(f'No password encoder has been configured for account "{account}".')

        if algorithm not in self._cache:
            encoder_cls = ENCODER_CLASSES.get(algorithm)
            if encoder_cls is None:
                raise EncoderNotFoundError(f'Unknown password hashing algorithm "{algorithm}" for account "{account}".')
            self._cache[algorithm] = encoder_cls(time_cost=self._time_cost, memory_cost=self._memory_cost)
        return self._cache[algorithm]


@lru_cache
def get_encoder_factory() -> EncoderFactory:
    return EncoderFactory(
        settings.PASSWORD_ENCODERS,
        time_cost=settings.PASSWORD_HASH_TIME_COST,
        memory_cost=settings.PASSWORD_HASH_MEMORY_COST,
    )
