# space_auth/services/_shared/base.py
from __future__ import annotations

from space_auth.core import errors as api_errors
from space_auth.services._shared.errors import (
    ConflictError,
    EmailTakenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    StorageError,
    TokenInactiveError,
    ValidationError,
)
from space_auth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation to API errors.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply `SET TRANSACTION READ ONLY` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        ============================  ========================  ======
        Service error                 ``code``                  Status
        ============================  ========================  ======
        ``ValidationError``           ``validation_error``      400
        ``InvalidCredentialsError``   ``invalid_credentials``   401
        ``InvalidTokenError``         ``invalid_token``         401
        ``TokenInactiveError``        ``token_inactive``        401
        ``EmailTakenError``           ``email_taken``           409
        ``ConflictError``             ``conflict``              409
        ``NotFoundError``             ``not_found``             404
        ``StorageError``              ``storage_error``         503
        ============================  ========================  ======

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, ValidationError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="validation_error",
                details={"errors": list(exc.messages)},
            )

        if isinstance(exc, InvalidCredentialsError):
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        if isinstance(exc, InvalidTokenError):
            return api_errors.Unauthorized(str(exc), code="invalid_token")

        if isinstance(exc, TokenInactiveError):
            # The cause (expired / revoked) stays server-side.
            return api_errors.Unauthorized(str(exc), code="token_inactive")

        if isinstance(exc, EmailTakenError):
            return api_errors.Conflict(str(exc), code="email_taken")

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, StorageError):
            return api_errors.ServiceUnavailable()

        # Any other ServiceError subclass -> 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
