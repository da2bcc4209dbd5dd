"""Employee sign-up form and confirmation view."""
import logging
from typing import Optional

import streamlit as st

from src.models.registration import (
    DEPARTMENTS,
    PARTICIPANT_COUNTS,
    PARTICIPANT_SOLO,
    PROGRAM_TYPES,
    RegistrationRecord,
)
from src.models.save_result import UNCONFIGURED, SaveResult
from src.services.admin_service import current_employee_id, logout
from src.services.registration_service import RegistrationStore
from src.utils.exceptions import LocalStorageError
from src.utils.validation import validate_registration_form

logger = logging.getLogger(__name__)

RECORD_KEY = "employee_record"
LOADED_FOR_KEY = "employee_record_loaded_for"
VIEW_MODE_KEY = "employee_view_mode"
FEEDBACK_KEY = "employee_feedback"
FORM_VERSION_KEY = "employee_form_version"


def save_feedback(result: SaveResult) -> tuple:
    """Map a save outcome to a (level, message) notification."""
    if result.synced:
        return "success", "同步云端成功！"
    if result.failure_reason == UNCONFIGURED:
        return "warning", "已保存至本地"
    return "warning", "网络受限，已保存至本地缓存"


def _sign_out() -> None:
    for key in (RECORD_KEY, LOADED_FOR_KEY, VIEW_MODE_KEY, FORM_VERSION_KEY):
        st.session_state.pop(key, None)
    logout()


def _load_existing(store: RegistrationStore, employee_id: str) -> None:
    if st.session_state.get(LOADED_FOR_KEY) == employee_id:
        return

    with st.spinner("正在同步数据..."):
        existing = store.get_by_employee_id(employee_id)

    st.session_state[RECORD_KEY] = existing
    st.session_state[VIEW_MODE_KEY] = existing is not None
    st.session_state[LOADED_FOR_KEY] = employee_id


def _show_feedback() -> None:
    feedback = st.session_state.pop(FEEDBACK_KEY, None)
    if not feedback:
        return

    level, message = feedback
    if level == "success":
        st.success(f"✅ {message}")
    elif level == "warning":
        st.warning(f"⚠️ {message}")
    else:
        st.error(f"❌ {message}")


def _render_confirmation(record: RegistrationRecord) -> None:
    st.markdown("## ✅ 报名信息确认")
    st.caption(f"最后保存: {record.timestamp}")

    col1, col2, col3 = st.columns(3)
    col1.metric("员工姓名", record.name)
    col2.metric("工号", record.employee_id)
    col3.metric("部门", record.department or "-")

    st.markdown(f"**节目名称：** {record.program_name}")
    st.markdown(f"**节目类型：** {record.program_type} · {record.participant_count}")
    if record.is_group:
        st.markdown(f"**参演人员名单：** {record.roster}")
    st.markdown(f"**节目推荐：** {record.recommended_program or '-'}")

    edit_col, logout_col = st.columns(2)
    with edit_col:
        if st.button("修改报名", use_container_width=True, type="primary"):
            st.session_state[VIEW_MODE_KEY] = False
            st.rerun()
    with logout_col:
        if st.button("退出", use_container_width=True, key="employee_logout_view"):
            _sign_out()
            st.rerun()


def _option_index(options, value, default: Optional[int] = 0) -> Optional[int]:
    return options.index(value) if value in options else default


def _render_form(store: RegistrationStore, employee_id: str) -> None:
    record = st.session_state.get(RECORD_KEY) or RegistrationRecord(employee_id=employee_id)
    version = st.session_state.get(FORM_VERSION_KEY, 0)
    departments = list(DEPARTMENTS)

    st.markdown("## 📝 节目报名")

    with st.form(f"registration_form_{version}", clear_on_submit=False):
        name = st.text_input("姓名", value=record.name, placeholder="请输入真实姓名")
        st.text_input("工号", value=employee_id, disabled=True)
        department = st.selectbox(
            "部门",
            departments,
            index=_option_index(departments, record.department, None),
            placeholder="请选择部门",
        )
        participant_count = st.radio(
            "参演人数",
            list(PARTICIPANT_COUNTS),
            index=_option_index(list(PARTICIPANT_COUNTS), record.participant_count),
            horizontal=True,
        )
        program_name = st.text_input("节目名称", value=record.program_name, placeholder="请输入节目名称")
        program_type = st.selectbox(
            "节目类型",
            list(PROGRAM_TYPES),
            index=_option_index(list(PROGRAM_TYPES), record.program_type),
        )
        participant_list = st.text_area(
            "参演人员名单（多人节目必填）",
            value=record.participant_list,
            placeholder="请填写所有参与者的姓名和工号",
        )
        recommended_program = st.text_area(
            "节目推荐（选填）",
            value=record.recommended_program,
            placeholder="你希望在年会上看到什么样的节目？或者你觉得哪位同事很有才华？",
        )

        submit_col, clear_col = st.columns(2)
        with submit_col:
            submit = st.form_submit_button("提交报名", type="primary", use_container_width=True)
        with clear_col:
            clear = st.form_submit_button("清空节目信息", use_container_width=True)

    if clear:
        st.session_state[RECORD_KEY] = RegistrationRecord(
            employee_id=employee_id,
            name=name,
            department=department,
        )
        st.session_state[FORM_VERSION_KEY] = version + 1
        st.rerun()

    if submit:
        form_data = {
            "name": name,
            "employee_id": employee_id,
            "department": department,
            "program_name": program_name,
            "program_type": program_type,
            "participant_count": participant_count,
            "participant_list": participant_list,
            "recommended_program": recommended_program,
        }
        is_valid, error_msg = validate_registration_form(form_data)
        if not is_valid:
            st.error(f"❌ {error_msg}")
            return

        form_data["name"] = name.strip()
        form_data["program_name"] = program_name.strip()
        if participant_count == PARTICIPANT_SOLO:
            form_data["participant_list"] = ""

        try:
            with st.spinner("提交中..."):
                result = store.save(RegistrationRecord(**form_data))
        except LocalStorageError as error:
            logger.exception("Local save failed for %s", employee_id)
            st.error(f"❌ 提交失败，本地保存出错，请稍后重试（{error}）")
            return

        st.session_state[RECORD_KEY] = result.record
        st.session_state[VIEW_MODE_KEY] = True
        st.session_state[FEEDBACK_KEY] = save_feedback(result)
        st.rerun()

    if st.button("退出", key="employee_logout_form"):
        _sign_out()
        st.rerun()


def render_employee_view(store: RegistrationStore) -> None:
    """Render the sign-up area for the signed-in employee."""
    employee_id = current_employee_id()
    if not employee_id:
        st.error("请先输入工号")
        return

    _load_existing(store, employee_id)
    _show_feedback()

    record = st.session_state.get(RECORD_KEY)
    if st.session_state.get(VIEW_MODE_KEY) and record is not None:
        _render_confirmation(record)
    else:
        _render_form(store, employee_id)
