"""Exceptions raised by the auth info store and its collaborators.

Each exception class exposes static factory methods that carry a stable error code in
the message, so log lines and Sentry events can be grouped by failure.

Storage failures are not wrapped. Exceptions raised by SQLAlchemy reach the caller
unchanged.
"""


class AuthInfoError(Exception):
    """Base class for auth info store failures."""

    @staticmethod
    def empty_delete_condition() -> "AuthInfoError":
        """A delete was requested with a record that has no populated columns."""
        return AuthInfoError(
            "error-authinfo-1000 Refusing to delete auth info without a condition"
        )


class UserNotFound(AuthInfoError):
    """No identity was supplied, or no matching user or auth info record exists."""

    @staticmethod
    def no_identity() -> "UserNotFound":
        return UserNotFound("error-authinfo-1100 User not found: no user id or auth id")

    @staticmethod
    def no_auth_info() -> "UserNotFound":
        return UserNotFound("error-authinfo-1101 User not found: no auth info")

    @staticmethod
    def no_user(login_or_email: str) -> "UserNotFound":
        return UserNotFound(
            f"error-authinfo-1102 User not found: no user for {login_or_email!r}"
        )


class SecretsError(AuthInfoError):
    """Encrypting, decrypting or decoding secret material failed."""

    @staticmethod
    def decode_failed() -> "SecretsError":
        return SecretsError("error-authinfo-1200 Secret is not valid base64")

    @staticmethod
    def decrypt_failed() -> "SecretsError":
        return SecretsError("error-authinfo-1201 Secret could not be decrypted")

    @staticmethod
    def empty_payload() -> "SecretsError":
        return SecretsError("error-authinfo-1202 Refusing to decrypt an empty payload")

    @staticmethod
    def invalid_namespace(namespace: str) -> "SecretsError":
        return SecretsError(
            f"error-authinfo-1203 Invalid encryption namespace: {namespace!r}"
        )


class DispatchError(Exception):
    """Handler registration or lookup failed."""

    @staticmethod
    def already_registered(message_type: type) -> "DispatchError":
        return DispatchError(
            f"error-dispatch-1000 Handler already registered for {message_type.__name__}"
        )

    @staticmethod
    def no_handler(message_type: type) -> "DispatchError":
        return DispatchError(
            f"error-dispatch-1001 No handler registered for {message_type.__name__}"
        )
