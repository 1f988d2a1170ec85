"""
Test access control and dashboard user management.
"""
from sqlalchemy.orm import Session

from eventadmin.core.errors import ErrorCode
from eventadmin.core.result import Err, Ok
from eventadmin.models.profiles import Profile, ProfileRole
from eventadmin.services.users import (
    create_dashboard_user,
    delete_dashboard_user,
    get_current_user_profile,
    list_dashboard_users,
    require_role,
)


class TestCurrentProfile:
    """Test resolving the caller's profile."""

    def test_known_user(self, db_session: Session, admin):
        profile = get_current_user_profile(db_session, admin.id).value
        assert profile.email == "admin@example.com"
        assert profile.is_admin

    def test_unknown_user(self, db_session: Session):
        assert get_current_user_profile(db_session, "nobody").value is None

    def test_missing_identity(self, db_session: Session):
        assert get_current_user_profile(db_session, None).value is None

    def test_lookup_failure(self, db_session: Session, drop_table):
        """Test a failing profile query is reported instead of raised."""
        drop_table(Profile)

        result = get_current_user_profile(db_session, "someone")

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.REPOSITORY_ERROR


class TestRequireRole:
    """Test role checks."""

    def test_admin_passes_admin_check(self, admin):
        assert isinstance(require_role(admin, ProfileRole.ADMIN), Ok)

    def test_organiser_fails_admin_check(self, organiser):
        result = require_role(organiser, ProfileRole.ADMIN)

        assert result.error.code == ErrorCode.PERMISSION_DENIED
        assert result.error.details["role"] == "organiser"

    def test_any_role_by_default(self, organiser):
        assert isinstance(require_role(organiser), Ok)

    def test_anonymous(self):
        assert require_role(None).error.code == ErrorCode.NOT_AUTHENTICATED


class TestDashboardUsers:
    """Test admin-only user management."""

    def test_create_user(self, db_session: Session, admin):
        result = create_dashboard_user(
            db_session, email=" New@Example.com ", full_name=" New Person ", role="organiser", actor=admin
        )

        assert isinstance(result, Ok)
        assert result.value.email == "new@example.com"
        assert result.value.full_name == "New Person"
        assert result.value.role == "organiser"

    def test_create_duplicate_email(self, db_session: Session, admin):
        result = create_dashboard_user(
            db_session, email="ADMIN@example.com", full_name=None, role=ProfileRole.ADMIN, actor=admin
        )
        assert result.error.code == ErrorCode.DUPLICATE_EMAIL

    def test_create_invalid_fields(self, db_session: Session, admin):
        result = create_dashboard_user(db_session, email="", full_name=None, role="superuser", actor=admin)

        assert result.error.code == ErrorCode.VALIDATION_FAILED
        assert set(result.error.field_errors) == {"email", "role"}

    def test_organiser_cannot_create(self, db_session: Session, organiser):
        result = create_dashboard_user(
            db_session, email="x@example.com", full_name=None, role="admin", actor=organiser
        )
        assert result.error.code == ErrorCode.PERMISSION_DENIED

    def test_list_users(self, db_session: Session, admin, organiser):
        result = list_dashboard_users(db_session, actor=admin)
        assert {p.email for p in result.value} == {"admin@example.com", "organiser@example.com"}

    def test_organiser_cannot_list(self, db_session: Session, organiser):
        assert list_dashboard_users(db_session, actor=organiser).error.code == ErrorCode.PERMISSION_DENIED

    def test_delete_user(self, db_session: Session, admin, organiser):
        organiser_id = organiser.id

        result = delete_dashboard_user(db_session, organiser_id, actor=admin)

        assert isinstance(result, Ok)
        assert db_session.get(Profile, organiser_id) is None

    def test_delete_unknown_user(self, db_session: Session, admin):
        assert delete_dashboard_user(db_session, "nobody", actor=admin).error.code == ErrorCode.USER_NOT_FOUND

    def test_admin_cannot_delete_self(self, db_session: Session, admin):
        result = delete_dashboard_user(db_session, admin.id, actor=admin)

        assert result.error.code == ErrorCode.PERMISSION_DENIED
        assert db_session.get(Profile, admin.id) is not None
