import html

import streamlit as st

from deeptalk.state import session_slices


def render_header(ctx):
    user = ctx.user
    store = ctx.store
    cols = st.columns([1, 6, 1])
    with cols[0]:
        if user is not None and user.avatar:
            st.image(user.avatar, width=48)
    with cols[1]:
        name = html.escape(user.first_name or user.name) if user else "Guest"
        st.markdown(f"### DeepTalk • {name}")
        if user is not None:
            via = "Google token" if user.login_method == "token" else "session"
            st.caption(f"{user.email} • signed in via {via}")
    with cols[2]:
        if st.button("Sign out", key="header.sign_out"):
            ctx.sign_out()
            session_slices.close_dialog(st.session_state)
            st.rerun()

    if store.error:
        session_slices.show_banner(st.session_state, store.error, retry="refresh")
    message, retry = session_slices.banner(st.session_state)
    if not message:
        return
    banner_cols = st.columns([6, 1, 1])
    banner_cols[0].error(message)
    if retry and banner_cols[1].button("Retry", key="header.retry"):
        session_slices.dismiss_banner(st.session_state)
        store.clear_error()
        store.refresh()
        st.rerun()
    if banner_cols[2].button("Dismiss", key="header.dismiss"):
        session_slices.dismiss_banner(st.session_state)
        store.clear_error()
        st.rerun()
