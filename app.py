import logging

import streamlit as st

from deeptalk.context import build_context
from deeptalk.header import render_header
from deeptalk.logging_config import configure_logging
from deeptalk.router import render_router
from deeptalk.settings import get_settings
from deeptalk.tabs.login_tab import render_login
from deeptalk.visualizations import CALENDAR_CSS

logger = logging.getLogger("deeptalk.app")

CONTEXT_KEY = "deeptalk.context"


st.set_page_config(page_title="DeepTalk", layout="wide")


def get_context():
    ctx = st.session_state.get(CONTEXT_KEY)
    if ctx is None:
        settings = get_settings()
        configure_logging(settings.log_level)
        ctx = build_context(settings)
        st.session_state[CONTEXT_KEY] = ctx
        logger.info("DeepTalk dashboard started against %s", settings.base_url)
    return ctx


def ensure_authenticated(ctx):
    if not ctx.auth_state.is_authenticated:
        with st.spinner("Checking sign-in..."):
            ctx.auth_state = ctx.auth.resolve(st.query_params.to_dict())
        if ctx.auth_state.clear_url:
            st.query_params.clear()
    if not ctx.auth_state.is_authenticated:
        render_login(ctx)
        st.stop()


def ensure_loaded(ctx):
    user_id = ctx.user.id
    if ctx.loaded_for == user_id:
        return
    with st.spinner("Loading tasks..."):
        ctx.store.refresh()
    ctx.loaded_for = user_id


ctx = get_context()
ensure_authenticated(ctx)
ensure_loaded(ctx)

if ctx.store.auth_failed:
    logger.warning("Backend rejected credentials, signing out")
    ctx.sign_out()
    st.rerun()

st.markdown(CALENDAR_CSS, unsafe_allow_html=True)
render_header(ctx)
render_router(ctx)
