"""Unit tests for SQLAlchemyReadOnlyUnitOfWork guards."""

from __future__ import annotations

import pytest
from space_auth.models import Role, User
from space_auth.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from space_auth.uow import SQLAlchemyUnitOfWork as RWuow
from sqlalchemy import text
from sqlalchemy.orm import scoped_session
from tests.factories.role import RoleFactory
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self):
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("INSERT INTO roles (id, name) VALUES (:id, :name)"),
                {"id": "r-1", "name": "Blocked"},
            )

    def test_allows_reads(self):
        with RWuow() as uow:
            uow.users.add(UserFactory.build(email="reader@example.com"))

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1
            assert uow.users.get_by_email("reader@example.com") is not None

    def test_disallows_commit(self):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guards_removed_on_exit(self):
        with ROuow():
            pass
        # Writes work again once the read-only scope is closed
        with RWuow() as uow:
            uow.roles.add(Role(name="AfterReadOnly"))

    def test_attaches_to_open_transaction(self, session):
        """Work flushed earlier in the same transaction survives the read scope."""
        role = RoleFactory(name="Flushed")
        assert session().in_transaction()

        with ROuow() as uow:
            assert uow.roles.get_by_name("Flushed") is role

        assert session().in_transaction()
        assert session.get(Role, role.id) is role

    def test_enters_on_scoped_session_registry(self, session):
        """The Flask-scoped registry is resolved before checking transaction state."""
        assert isinstance(session, scoped_session)
        assert not session().in_transaction()

        with ROuow() as uow:
            assert isinstance(uow.session, scoped_session)
            assert uow.users.get_by_email("nobody@example.com") is None
