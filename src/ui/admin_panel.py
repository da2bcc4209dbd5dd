"""Admin panel: registration list, search, delete and CSV export."""
import logging
import traceback
from typing import Dict, Iterable, List

import streamlit as st

from src.models.registration import RegistrationRecord
from src.services.admin_service import is_admin_authenticated, login_admin, logout
from src.services.export_service import CSV_MIME_TYPE, export_csv, export_filename
from src.services.registration_service import RegistrationStore
from src.utils.exceptions import LocalStorageError

logger = logging.getLogger(__name__)


def _show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin panel error during %s", context)

    st.error(f"❌ {context}失败：{error}")
    with st.expander("🔍 错误详情"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def filter_registrations(records: Iterable[RegistrationRecord], term: str) -> List[RegistrationRecord]:
    """Match name, employee ID or department, case-insensitively."""
    term = (term or "").strip().lower()
    if not term:
        return list(records)

    return [
        r for r in records
        if term in r.name.lower() or term in r.employee_id.lower() or term in r.department.lower()
    ]


def registration_rows(records: Iterable[RegistrationRecord]) -> List[Dict[str, str]]:
    """Table rows for display."""
    return [
        {
            "姓名": r.name,
            "工号": r.employee_id,
            "部门": r.department,
            "节目名称": r.program_name,
            "类型": r.program_type,
            "人数": r.participant_count,
            "成员": r.roster,
            "节目推荐": r.recommended_program or "-",
            "最后更新": r.timestamp,
        }
        for r in records
    ]


def render_login_page() -> None:
    """Render admin password form."""
    with st.form("admin_login_form", clear_on_submit=False):
        st.markdown("### 🔐 管理员认证")
        password = st.text_input("管理密码", type="password", placeholder="请输入密码", key="admin_password_input")
        submit = st.form_submit_button("授权登录", type="primary", use_container_width=True)

        if submit:
            success, message = login_admin(password)
            if success:
                st.rerun()
            else:
                st.error(f"❌ {message}")


def _render_delete(store: RegistrationStore, records: List[RegistrationRecord]) -> None:
    with st.expander("🗑️ 删除报名记录"):
        options = [r.employee_id for r in records]
        labels = {r.employee_id: f"{r.employee_id} · {r.name}" for r in records}
        target = st.selectbox(
            "选择工号",
            options,
            index=None,
            format_func=lambda employee_id: labels.get(employee_id, employee_id),
            key="admin_delete_target",
        )
        confirm = st.checkbox("确认删除该记录", key="admin_delete_confirm")

        if st.button("删除", disabled=not (target and confirm)):
            try:
                remote_deleted = store.delete(target)
            except LocalStorageError as error:
                _show_admin_exception(error, "删除")
                return

            if remote_deleted:
                st.session_state["admin_feedback"] = ("success", f"已删除 {target}")
            elif store.remote_ready:
                st.session_state["admin_feedback"] = ("warning", f"已从本地删除 {target}，云端删除失败")
            else:
                st.session_state["admin_feedback"] = ("info", f"已从本地删除 {target}")
            st.rerun()


def render_admin_panel(store: RegistrationStore) -> None:
    """Render admin management panel."""
    if not is_admin_authenticated():
        render_login_page()
        return

    feedback = st.session_state.pop("admin_feedback", None)
    if feedback:
        level, message = feedback
        if level == "success":
            st.success(message)
        elif level == "warning":
            st.warning(message)
        else:
            st.info(message)

    with st.spinner("同步云端数据中..."):
        records = store.list_all()

    title_col, refresh_col, logout_col = st.columns([4, 1, 1], gap="small")
    with title_col:
        st.markdown("## 📊 信息管理后台")
        sync_label = "云端实时同步中" if store.remote_ready else "本地模式"
        st.caption(f"{sync_label}，当前报名：{len(records)} 人")
    with refresh_col:
        if st.button("🔄 刷新", use_container_width=True):
            st.rerun()
    with logout_col:
        if st.button("退出", use_container_width=True, key="admin_logout"):
            logout()
            st.rerun()

    search_col, export_col = st.columns([3, 1], gap="small")
    with search_col:
        term = st.text_input("搜索", placeholder="搜索姓名、工号或部门...", label_visibility="collapsed")
    with export_col:
        st.download_button(
            "导出 CSV",
            data=export_csv(records),
            file_name=export_filename(),
            mime=CSV_MIME_TYPE,
            use_container_width=True,
        )

    filtered = filter_registrations(records, term)
    if filtered:
        st.dataframe(registration_rows(filtered), use_container_width=True, hide_index=True)
    else:
        st.info("未找到匹配的报名记录")

    if records:
        _render_delete(store, records)
