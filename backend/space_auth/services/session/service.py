# space_auth/services/session/service.py
from __future__ import annotations

import logging
from datetime import UTC, datetime

from space_auth.core.config import AuthSettings
from space_auth.services._shared.base import BaseService
from space_auth.services._shared.errors import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenInactiveError,
    ValidationError,
)
from space_auth.services._shared.ports import (
    RefreshTokenStore,
    RefreshTokenView,
    RotationResult,
    TokenSigner,
    UserAccount,
    UserDirectory,
)
from space_auth.services.session.dto import (
    LoginIn,
    RefreshIn,
    RegisterIn,
    RevokeIn,
    SessionBundleOut,
    UserPublicOut,
)

log = logging.getLogger(__name__)


class SessionService(BaseService):
    """
    Session lifecycle service (register / login / refresh / revoke).

    Access tokens come from a :class:`TokenSigner`; refresh tokens live in a
    :class:`RefreshTokenStore` whose ``rotate`` is the only way a refresh
    token is redeemed. Accounts and passwords belong to the
    :class:`UserDirectory`.

    Every refresh token moves Active -> Revoked at most once (logout or
    rotation); Expired is derived from time. Nothing returns to Active.
    """

    def __init__(
        self,
        *,
        signer: TokenSigner,
        refresh_store: RefreshTokenStore,
        directory: UserDirectory,
        settings: AuthSettings,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param signer: Mints access tokens.
        :param refresh_store: Stateful refresh-token store (atomic rotation).
        :param directory: Account lookup, creation and password checks.
        :param settings: Frozen token lifetimes and claims configuration.
        """
        self.signer = signer
        self.refresh_store = refresh_store
        self.directory = directory
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> SessionBundleOut:
        """
        Create an account and open its first session.

        :raises EmailTakenError: The email is already registered.
        :raises ValidationError: The directory rejected email or password.
        :raises StorageError: The refresh-token store is unavailable.
        """
        try:
            account = self.directory.create_user(dto.email, dto.password, dto.display_name)
        except EmailTakenError:
            log.warning("session.register.rejected", extra={"cause": "email_taken"})
            raise
        except ValidationError:
            log.warning("session.register.rejected", extra={"cause": "validation"})
            raise

        record = self.refresh_store.issue(account.id, self.settings.refresh_expires)
        bundle = self._open_session(account, record)
        log.info("session.register.succeeded", extra={"user_id": account.id})
        return bundle

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionBundleOut:
        """
        Authenticate credentials and open a new session.

        Unknown email and wrong password raise the same error.

        :raises InvalidCredentialsError: Credentials do not match an account.
        :raises StorageError: The directory or refresh-token store is unavailable.
        """
        account = self.directory.find_user_by_email(dto.email)
        if account is None or not self.directory.verify_password(account, dto.password):
            log.warning("session.login.failed")
            raise InvalidCredentialsError()

        # Server-side record first, then the access token
        record = self.refresh_store.issue(account.id, self.settings.refresh_expires)
        bundle = self._open_session(account, record)
        log.info("session.login.succeeded", extra={"user_id": account.id})
        return bundle

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> SessionBundleOut:
        """
        Redeem a refresh token for a new bundle.

        The presented token is revoked and replaced in one atomic store
        operation; of two concurrent redemptions only one succeeds.

        :raises InvalidTokenError: No record exists for the token.
        :raises TokenInactiveError: The token is expired or revoked, or a
            concurrent refresh consumed it first.
        :raises StorageError: The refresh-token store is unavailable.
        """
        current = self.refresh_store.find(dto.refresh_token)
        if current is None:
            log.warning("session.refresh.failed", extra={"cause": "not_found"})
            raise InvalidTokenError()
        if not current.is_active:
            cause = TokenInactiveError.REVOKED if current.is_revoked else TokenInactiveError.EXPIRED
            log.warning(
                "session.refresh.failed", extra={"user_id": current.user_id, "cause": cause}
            )
            raise TokenInactiveError(cause)

        account = self.directory.get_user(current.user_id)
        if account is None:
            log.warning(
                "session.refresh.failed", extra={"user_id": current.user_id, "cause": "no_user"}
            )
            raise InvalidTokenError()

        rotation = self.refresh_store.rotate(
            old_token=dto.refresh_token,
            user_id=current.user_id,
            ttl=self.settings.refresh_expires,
        )
        if rotation.result is RotationResult.NOT_FOUND:
            log.warning("session.refresh.failed", extra={"cause": "not_found"})
            raise InvalidTokenError()
        if rotation.result is not RotationResult.OK or rotation.token is None:
            cause = (
                TokenInactiveError.EXPIRED
                if rotation.result is RotationResult.EXPIRED
                else TokenInactiveError.REVOKED
            )
            log.warning(
                "session.refresh.failed", extra={"user_id": current.user_id, "cause": cause}
            )
            raise TokenInactiveError(cause)

        bundle = self._open_session(account, rotation.token)
        log.info("session.refresh.succeeded", extra={"user_id": account.id})
        return bundle

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, dto: RevokeIn) -> None:
        """
        Revoke a refresh token (logout).

        Idempotent: unknown and already revoked tokens are accepted silently.

        :raises StorageError: The refresh-token store is unavailable.
        """
        self.refresh_store.revoke(dto.refresh_token)
        log.info("session.revoke.succeeded")

    # ------------------------------------------------------------------ #
    # Current user
    # ------------------------------------------------------------------ #

    def current_user(self, user_id: str) -> UserPublicOut:
        """
        Project the account named by a verified access token.

        :raises InvalidTokenError: The token subject no longer exists.
        """
        account = self.directory.get_user(user_id)
        if account is None:
            raise InvalidTokenError("Token subject no longer exists")
        return UserPublicOut.from_account(account, self.directory.roles_of(account))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _open_session(self, account: UserAccount, record: RefreshTokenView) -> SessionBundleOut:
        roles = self.directory.roles_of(account)
        issued_at = datetime.now(UTC)
        access = self.signer.issue_access_token(account, roles)
        return SessionBundleOut(
            access_token=access,
            refresh_token=record.token,
            expires_at=issued_at + self.settings.access_expires,
            user=UserPublicOut.from_account(account, roles),
        )
