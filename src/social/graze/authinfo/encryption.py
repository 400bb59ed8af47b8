"""Secret encryption service used at the storage boundary.

The store depends on the ``SecretsService`` interface only. ``FernetSecretsService``
is the default implementation, keyed by the ``ENCRYPTION_KEY`` setting.

Payload format:

* Unscoped payloads are plain Fernet tokens encrypted with the root key.
* Scoped payloads are ``#<namespace>#<token>`` where ``<namespace>`` is the urlsafe
  base64 encoded namespace and ``<token>`` is a Fernet token encrypted with a key
  derived from the root key and the namespace. Fernet tokens never start with ``#``,
  so ``decrypt`` can tell the two apart without a scope argument.
"""

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from social.graze.authinfo.errors import SecretsError

logger = logging.getLogger(__name__)

SCOPE_MARKER = b"#"


@dataclass(frozen=True)
class EncryptionScope:
    """Key context for an encryption call.

    ``namespace`` of ``None`` means the default, global key context.
    """

    namespace: Optional[str] = None

    @staticmethod
    def unscoped() -> "EncryptionScope":
        return EncryptionScope()

    @staticmethod
    def scoped_to(namespace: str) -> "EncryptionScope":
        if not namespace:
            raise SecretsError.invalid_namespace(namespace)
        return EncryptionScope(namespace=namespace)

    @property
    def is_scoped(self) -> bool:
        return self.namespace is not None


class SecretsService(ABC):
    """Symmetric encryption of sensitive byte payloads."""

    @abstractmethod
    async def encrypt(self, payload: bytes, scope: EncryptionScope) -> bytes:
        pass

    @abstractmethod
    async def decrypt(self, payload: bytes) -> bytes:
        """
        Decrypt a payload produced by ``encrypt``.

        Callers must not pass an empty payload.
        """
        pass


class FernetSecretsService(SecretsService):
    """SecretsService backed by Fernet with HKDF derived keys for scoped calls."""

    def __init__(self, key: bytes) -> None:
        self._root_key = key
        self._root = Fernet(key)
        self._scoped: Dict[str, Fernet] = {}

    def _fernet_for(self, namespace: str) -> Fernet:
        fernet = self._scoped.get(namespace)
        if fernet is None:
            derived = HKDF(
                algorithm=hashes.SHA256(),
                length=32,
                salt=None,
                info=b"authinfo-scope:" + namespace.encode("utf-8"),
            ).derive(base64.urlsafe_b64decode(self._root_key))
            fernet = Fernet(base64.urlsafe_b64encode(derived))
            self._scoped[namespace] = fernet
        return fernet

    async def encrypt(self, payload: bytes, scope: EncryptionScope) -> bytes:
        if not scope.is_scoped:
            return self._root.encrypt(payload)

        namespace = scope.namespace or ""
        token = self._fernet_for(namespace).encrypt(payload)
        encoded_namespace = base64.urlsafe_b64encode(namespace.encode("utf-8"))
        return SCOPE_MARKER + encoded_namespace + SCOPE_MARKER + token

    async def decrypt(self, payload: bytes) -> bytes:
        if len(payload) == 0:
            raise SecretsError.empty_payload()

        try:
            if not payload.startswith(SCOPE_MARKER):
                return self._root.decrypt(payload)

            _, encoded_namespace, token = payload.split(SCOPE_MARKER, 2)
            namespace = base64.urlsafe_b64decode(encoded_namespace).decode("utf-8")
            return self._fernet_for(namespace).decrypt(token)
        except (InvalidToken, ValueError, binascii.Error) as e:
            raise SecretsError.decrypt_failed() from e
