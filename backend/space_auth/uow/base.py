"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from space_auth.repositories import (
        RefreshTokenRepository,
        RoleRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    Transactional boundary for one use-case.

    Repositories exposed by a unit of work share its session, so every change
    made through them commits or rolls back together.

    Attributes
    ----------
    users:
        Account records.
    roles:
        Role records and the user/role association.
    refresh_tokens:
        Refresh-token records (digest-keyed).
    """

    users: UserRepository
    roles: RoleRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
