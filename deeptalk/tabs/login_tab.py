import logging

import streamlit as st

from deeptalk.data.api_client import DeepTalkError

logger = logging.getLogger(__name__)


def render_login(ctx):
    state = ctx.auth_state
    st.markdown("## DeepTalk")
    st.caption("Sign in with Google to see your tasks and calendar.")

    if state.error:
        st.error(state.error)

    cols = st.columns([1, 1, 3])
    if cols[0].button("Sign in with Google", key="login.google", type="primary"):
        try:
            auth_url = ctx.auth.start_google_login()
        except DeepTalkError as exc:
            logger.error("Google login failed to start: %s", exc)
            st.error(f"Google login failed: {exc}")
        else:
            st.link_button("Continue to Google", auth_url)
    if cols[1].button("Retry", key="login.retry"):
        ctx.auth_state = ctx.auth.resolve()
        st.rerun()
