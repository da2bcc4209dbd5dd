"""Sign-in state for employees and the shared admin password."""
import os
import streamlit as st
from typing import Optional, Tuple

from src.services.config_service import load_env
from src.utils.validation import validate_employee_id

DEFAULT_ADMIN_PASSWORD = "12"


def authenticate_admin(password: str) -> bool:
    """
    Check the shared admin password.

    Args:
        password: Password typed on the admin tab

    Returns:
        True if it matches ADMIN_PASSWORD (default "12"), False otherwise

    Security:
        - Single shared credential, plain-text comparison
    """
    load_env()

    admin_password = os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)

    return bool(password) and password == admin_password


def is_admin_authenticated() -> bool:
    """True if st.session_state['admin_authenticated'] is set."""
    return st.session_state.get("admin_authenticated", False)


def login_admin(password: str) -> Tuple[bool, str]:
    """
    Log in as administrator.

    Returns:
        Tuple of (success: bool, message: str)
        - (True, "登录成功") on success
        - (False, "密码出现错误") on failure
    """
    if authenticate_admin(password):
        st.session_state["admin_authenticated"] = True
        return True, "登录成功"
    else:
        return False, "密码出现错误"


def login_employee(employee_id: str) -> Tuple[bool, str]:
    """
    Enter the employee area with an employee ID.

    Returns:
        Tuple of (success: bool, message: str)
    """
    is_valid, error_msg = validate_employee_id(employee_id)
    if not is_valid:
        return False, error_msg

    st.session_state["current_employee_id"] = employee_id.strip()
    return True, ""


def current_employee_id() -> Optional[str]:
    return st.session_state.get("current_employee_id")


def logout() -> None:
    """Clear both admin and employee sign-in state."""
    for key in ("admin_authenticated", "current_employee_id"):
        if key in st.session_state:
            del st.session_state[key]
