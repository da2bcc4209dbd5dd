"""Data validation utilities for the sign-up form."""
from typing import Any, Dict, Tuple

from src.models.registration import (
    DEPARTMENTS,
    PARTICIPANT_COUNTS,
    PARTICIPANT_GROUP,
    PROGRAM_TYPES,
)

MAX_NAME_LENGTH = 50


def _text(form_data: Dict[str, Any], key: str) -> str:
    value = form_data.get(key)
    return value.strip() if isinstance(value, str) else ""


def validate_employee_id(employee_id: str) -> Tuple[bool, str]:
    """
    Validate an employee ID typed at sign-in.

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    if not employee_id or not employee_id.strip():
        return False, "请输入工号"
    return True, ""


def validate_name(name: str) -> Tuple[bool, str]:
    """
    Validate an employee name.

    Args:
        name: Name to validate

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    if not name or not name.strip():
        return False, "姓名不可为空"
    if len(name.strip()) > MAX_NAME_LENGTH:
        return False, f"姓名长度不可超过 {MAX_NAME_LENGTH} 字"
    return True, ""


def validate_registration_form(form_data: Dict[str, Any]) -> Tuple[bool, str]:
    """
    Validate sign-up form input before saving.

    Args:
        form_data: Dictionary with keys name, employee_id, department,
            program_name, program_type, participant_count, participant_list

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    name = _text(form_data, "name")
    employee_id = _text(form_data, "employee_id")
    department = _text(form_data, "department")

    if not name or not employee_id or not department:
        return False, "请填写完整的姓名、工号和部门"

    is_valid, error_msg = validate_name(name)
    if not is_valid:
        return False, error_msg

    if department not in DEPARTMENTS:
        return False, "请选择有效的部门"

    if not _text(form_data, "program_name"):
        return False, "请填写节目名称"

    if form_data.get("program_type") not in PROGRAM_TYPES:
        return False, "请选择有效的节目类型"

    participant_count = form_data.get("participant_count")
    if participant_count not in PARTICIPANT_COUNTS:
        return False, "请选择参演人数"

    if participant_count == PARTICIPANT_GROUP and not _text(form_data, "participant_list"):
        return False, "请填写参演人员名单"

    return True, ""
