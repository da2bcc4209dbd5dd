"""Unit tests for admin_service."""
import pytest
from unittest.mock import patch

from src.services import config_service
from src.services.admin_service import (
    authenticate_admin,
    current_employee_id,
    is_admin_authenticated,
    login_admin,
    login_employee,
    logout
)


@pytest.fixture(autouse=True)
def skip_dotenv(monkeypatch):
    monkeypatch.setattr(config_service, "_ENV_LOADED", True)


class TestAuthenticateAdmin:
    """Test authenticate_admin function."""

    def test_authenticate_with_correct_password(self, monkeypatch):
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("testpass") is True

    def test_authenticate_with_wrong_password(self, monkeypatch):
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("wrongpass") is False

    def test_authenticate_with_empty_password(self, monkeypatch):
        monkeypatch.setenv("ADMIN_PASSWORD", "testpass")

        assert authenticate_admin("") is False

    def test_authenticate_uses_default_password(self, monkeypatch):
        """Default shared password applies when ADMIN_PASSWORD is not set."""
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

        assert authenticate_admin("12") is True


class TestIsAdminAuthenticated:
    """Test is_admin_authenticated function."""

    @patch('src.services.admin_service.st')
    def test_returns_true_when_authenticated(self, mock_st):
        mock_st.session_state.get.return_value = True

        assert is_admin_authenticated() is True
        mock_st.session_state.get.assert_called_once_with("admin_authenticated", False)

    @patch('src.services.admin_service.st')
    def test_returns_false_when_not_authenticated(self, mock_st):
        mock_st.session_state.get.return_value = False

        assert is_admin_authenticated() is False


class TestLoginAdmin:
    """Test login_admin function."""

    @patch('src.services.admin_service.authenticate_admin')
    @patch('src.services.admin_service.st')
    def test_login_success(self, mock_st, mock_auth):
        mock_auth.return_value = True
        mock_st.session_state = {}

        success, message = login_admin("12")

        assert success is True
        assert message == "登录成功"
        assert mock_st.session_state["admin_authenticated"] is True

    @patch('src.services.admin_service.authenticate_admin')
    @patch('src.services.admin_service.st')
    def test_login_failure(self, mock_st, mock_auth):
        mock_auth.return_value = False
        mock_st.session_state = {}

        success, message = login_admin("wrong")

        assert success is False
        assert message == "密码出现错误"
        assert "admin_authenticated" not in mock_st.session_state


class TestLoginEmployee:
    """Test login_employee function."""

    @patch('src.services.admin_service.st')
    def test_login_with_employee_id(self, mock_st):
        mock_st.session_state = {}

        success, message = login_employee(" 1001 ")

        assert success is True
        assert mock_st.session_state["current_employee_id"] == "1001"

    @patch('src.services.admin_service.st')
    def test_login_with_empty_id(self, mock_st):
        mock_st.session_state = {}

        success, message = login_employee("   ")

        assert success is False
        assert message == "请输入工号"
        assert "current_employee_id" not in mock_st.session_state

    @patch('src.services.admin_service.st')
    def test_login_with_missing_id(self, mock_st):
        mock_st.session_state = {}

        assert login_employee(None) == (False, "请输入工号")
        assert "current_employee_id" not in mock_st.session_state

    @patch('src.services.admin_service.st')
    def test_current_employee_id(self, mock_st):
        mock_st.session_state = {"current_employee_id": "1001"}

        assert current_employee_id() == "1001"


class TestLogout:
    """Test logout function."""

    @patch('src.services.admin_service.st')
    def test_logout_clears_session_state(self, mock_st):
        mock_st.session_state = {"admin_authenticated": True, "current_employee_id": "1001"}

        logout()

        assert mock_st.session_state == {}

    @patch('src.services.admin_service.st')
    def test_logout_when_not_authenticated(self, mock_st):
        mock_st.session_state = {}

        logout()

        assert "admin_authenticated" not in mock_st.session_state
