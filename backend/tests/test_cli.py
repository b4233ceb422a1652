"""CLI command tests (flask users / products / system)."""

from datetime import timedelta

from kasir.extensions import db
from kasir.models import SessionToken, User
from kasir.services import session_service
from kasir.time_utils import utcnow


class TestUsersCommands:

    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()

        result = runner.invoke(args=[
            "users", "create",
            "--username", "kasir1",
            "--email", "kasir1@kasir.test",
            "--password", "Password123!",
            "--name", "Kasir Satu",
        ])
        assert result.exit_code == 0, result.output
        assert "PASS Created user: kasir1" in result.output
        assert db.session.query(User).filter_by(username="kasir1").count() == 1

        result = runner.invoke(args=["users", "list"])
        assert result.exit_code == 0
        assert "kasir1" in result.output
        assert "active" in result.output

    def test_create_with_weak_password_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=[
            "users", "create",
            "--username", "kasir2",
            "--email", "kasir2@kasir.test",
            "--password", "weak",
        ])

        assert result.exit_code == 1
        assert "FAIL" in result.output
        assert db.session.query(User).count() == 0

    def test_list_without_users(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "list"])
        assert "No users found" in result.output


class TestProductsCommands:

    def test_list_for_user(self, app, cashier, other_cashier, make_product):
        make_product(cashier, name="Bakso")
        make_product(None, name="Air Mineral")
        make_product(other_cashier, name="Soto")

        result = app.test_cli_runner().invoke(args=["products", "list", "--user", "cashier"])

        assert result.exit_code == 0
        assert "Bakso" in result.output
        assert "Air Mineral" in result.output
        assert "shared" in result.output
        assert "Soto" not in result.output

    def test_unknown_user_fails(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["products", "list", "--user", "ghost"])
        assert result.exit_code == 1


class TestSystemCommands:

    def test_cleanup_sessions_removes_old_revoked_tokens(self, app, cashier):
        session, token = session_service.create_session(cashier.id)
        session_service.revoke_session(token)
        old = db.session.get(SessionToken, session.id)
        old.created_at = utcnow() - timedelta(days=31)
        db.session.commit()
        fresh, _ = session_service.create_session(cashier.id)
        fresh_id = fresh.id

        result = app.test_cli_runner().invoke(args=["system", "cleanup-sessions"])

        assert result.exit_code == 0
        assert "Deleted 1 session(s)" in result.output
        db.session.expire_all()
        assert db.session.get(SessionToken, fresh_id) is not None

    def test_reset_requires_confirmation(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "reset-db"])
        assert result.exit_code == 1
