"""
年会节目报名系统主应用程式
Annual Gala Program Registration
"""
import logging
import os

import streamlit as st

from src.services.admin_service import is_admin_authenticated, current_employee_id, login_employee
from src.services.config_service import load_env
from src.services.registration_service import RegistrationStore, build_registration_store
from src.ui.admin_panel import render_admin_panel
from src.ui.employee_view import render_employee_view

logger = logging.getLogger(__name__)


# Streamlit 页面配置
st.set_page_config(
    page_title="2026年公司年会盛典",
    page_icon="🎉",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def configure_logging():
    """依 LOG_LEVEL 设定根 logger。"""
    load_env()
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@st.cache_resource
def get_registration_store() -> RegistrationStore:
    """启动时依配置建立一次报名存储。"""
    return build_registration_store()


def initialize_session_state():
    """初始化 session state 预设值。"""
    if "role" not in st.session_state:
        st.session_state.role = "employee"

    if "admin_authenticated" not in st.session_state:
        st.session_state.admin_authenticated = False


def apply_custom_css():
    """套用自订 CSS 样式。"""
    st.markdown("""
        <style>
        .stApp {
            background: linear-gradient(135deg, #0f172a 0%, #1e1b4b 50%, #0f172a 100%);
        }

        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}

        .gala-title {
            text-align: center;
            font-size: 2.6rem;
            font-weight: 800;
            color: #ffffff;
            margin-bottom: 0;
        }

        .gala-subtitle {
            text-align: center;
            color: #60a5fa;
            letter-spacing: 0.3em;
            font-size: 0.85rem;
            margin-bottom: 2rem;
        }

        .gala-footer {
            text-align: center;
            color: #64748b;
            font-size: 0.75rem;
            margin-top: 3rem;
        }
        </style>
    """, unsafe_allow_html=True)


def render_header():
    st.markdown("<h1 class='gala-title'>2026年公司年会盛典</h1>", unsafe_allow_html=True)
    st.markdown("<div class='gala-subtitle'>星辰大海 · 共创未来 · 报名系统</div>", unsafe_allow_html=True)


def render_login():
    """员工 / 管理端 切换与登录。"""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        role = st.radio(
            "身份",
            ["employee", "admin"],
            format_func=lambda value: "员工通道" if value == "employee" else "管理端",
            horizontal=True,
            label_visibility="collapsed",
            key="role",
        )

        if role == "employee":
            with st.form("employee_login_form"):
                st.markdown("### 员工登录")
                employee_id = st.text_input("输入工号进入", placeholder="例如: 1001")
                if st.form_submit_button("立即进入", type="primary", use_container_width=True):
                    success, message = login_employee(employee_id)
                    if success:
                        st.rerun()
                    else:
                        st.error(message)
        else:
            store = get_registration_store()
            render_admin_panel(store)


def render_current_page():
    """依登录状态渲染对应内容。"""
    try:
        store = get_registration_store()

        if is_admin_authenticated():
            render_admin_panel(store)
        elif current_employee_id():
            render_employee_view(store)
        else:
            render_login()

    except Exception as e:
        # 错误边界
        logger.exception("Unhandled exception while rendering page")
        st.error("发生错误，请稍后再试")

        with st.expander("🔍 错误详情"):
            st.code(str(e))


def main():
    """主应用程式入口。"""
    configure_logging()
    initialize_session_state()
    apply_custom_css()
    render_header()
    render_current_page()
    st.markdown("<div class='gala-footer'>© 2026 公司年会组委会 · 数字报名系统 v1.0</div>", unsafe_allow_html=True)


if __name__ == "__main__":
    main()
