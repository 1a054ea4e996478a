"""
Streamlit UI for Ball Knowledge – football score predictions.

Run from project root:

    streamlit run src/ballknowledge/ui/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# ---------------------------------------------------------------------------
# Ensure the project src/ directory is on sys.path so that:
#   from ballknowledge.app_context import ...
# works when running via "streamlit run src/ballknowledge/ui/app.py"
# from the project root.
# ---------------------------------------------------------------------------
SRC_ROOT = Path(__file__).resolve().parents[2]  # .../ballknowledge/src
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from ballknowledge.app_context import ClientContext, build_client_context  # noqa: E402
from ballknowledge.auth.errors import (  # noqa: E402
    BallKnowledgeError,
    RequestFailed,
    SessionExpired,
)
from ballknowledge.config import HOME_VIEW, LOGIN_VIEW  # noqa: E402
from ballknowledge.ui.guard import RouteGuard  # noqa: E402
from ballknowledge.ui.tables import (  # noqa: E402
    leaderboard_frame,
    matches_frame,
    open_matches,
)

VIEW_KEY = "view"
FLASH_KEY = "flash"
CONTEXT_KEY = "client"


def navigate(view: str) -> None:
    """Switch view on the next rerun."""
    st.session_state[VIEW_KEY] = view


def _on_session_expired() -> None:
    st.session_state[FLASH_KEY] = "Your session has expired. Please log in again."
    navigate(LOGIN_VIEW)


def get_client() -> ClientContext:
    """One client per browser session, kept in st.session_state."""
    if CONTEXT_KEY not in st.session_state:
        st.session_state[CONTEXT_KEY] = build_client_context(
            on_session_expired=_on_session_expired
        )
    return st.session_state[CONTEXT_KEY]


def _show_error(exc: BallKnowledgeError, prefix: str) -> None:
    if isinstance(exc, SessionExpired):
        st.rerun()
    if isinstance(exc, RequestFailed):
        st.error(f"{prefix}: {exc.message}")
    else:
        st.error(f"{prefix}: {exc}")


def render_home(client: ClientContext) -> None:
    st.header("Welcome to the Football Prediction App")
    st.write("Predict the scores of football matches and compete with others!")

    if not client.store.current_session().is_authenticated:
        col_left, col_right = st.columns(2)
        if col_left.button("Register"):
            navigate("register")
            st.rerun()
        if col_right.button("Login"):
            navigate(LOGIN_VIEW)
            st.rerun()
    elif st.button("Make a Prediction"):
        navigate("predict")
        st.rerun()


def render_login(client: ClientContext) -> None:
    st.header("Login")
    with st.form("login_form"):
        username_or_email = st.text_input("Username or Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")

    if not submitted:
        return

    if not username_or_email or not password:
        st.warning("Username/email and password are required.")
        return

    try:
        client.api.login(username_or_email, password)
    except BallKnowledgeError as exc:
        _show_error(exc, "Login failed")
        return

    st.success("Login successful!")
    navigate(HOME_VIEW)
    st.rerun()


def render_register(client: ClientContext) -> None:
    st.header("Register")
    with st.form("register_form"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Register")

    if not submitted:
        return

    try:
        result = client.api.register_user(username, email, password)
    except BallKnowledgeError as exc:
        _show_error(exc, "Registration failed")
        return
    except ValueError:
        st.warning("Please fill in all fields.")
        return

    token = result.get("token")
    if token:
        try:
            client.store.login(token)
        except BallKnowledgeError as exc:
            _show_error(exc, "Registered, but could not log in")
            return
        navigate(HOME_VIEW)
        st.rerun()

    st.success("Registration successful! You can now log in.")


def render_matches(client: ClientContext) -> None:
    st.header("Matches")
    gameweek = st.number_input("Gameweek (0 = all)", min_value=0, step=1, value=0)

    try:
        if gameweek:
            matches = client.api.get_matches_for_gameweek(int(gameweek))
        else:
            matches = client.api.get_matches()
    except BallKnowledgeError as exc:
        _show_error(exc, "Error fetching matches")
        return

    if not matches:
        st.info("No matches found.")
        return

    st.dataframe(
        matches_frame(matches, client.predictions.index),
        use_container_width=True,
    )


def render_predict(client: ClientContext) -> None:
    st.header("Make a prediction")
    cache = client.predictions

    if cache.error is not None:
        st.warning(f"Could not load your predictions: {cache.error}")
        if st.button("Retry"):
            cache.refetch()
            st.rerun()

    try:
        matches = client.api.get_matches()
    except BallKnowledgeError as exc:
        _show_error(exc, "Error fetching matches")
        return

    available = open_matches(matches, cache.index)
    predicted = [m for m in matches if cache.has_prediction(m.id)]

    if predicted:
        with st.expander(f"Already predicted ({len(predicted)})"):
            for m in predicted:
                p = cache.get(m.id)
                st.write(
                    f"{m.label}: **{p.predicted_score_home}-{p.predicted_score_away}**"
                )

    if not available:
        st.info("You have predicted every available match.")
        return

    labels = {m.label: m for m in available}
    with st.form("prediction_form"):
        selected = st.selectbox("Select a match", options=list(labels.keys()))
        col_home, col_away = st.columns(2)
        home = col_home.number_input("Home score", min_value=0, step=1, value=0)
        away = col_away.number_input("Away score", min_value=0, step=1, value=0)
        submitted = st.form_submit_button("Submit Prediction")

    if not submitted:
        return

    match = labels[selected]
    if cache.has_prediction(match.id):
        st.warning("You have already predicted this match.")
        return

    try:
        prediction = client.api.create_prediction(match.id, int(home), int(away))
    except BallKnowledgeError as exc:
        _show_error(exc, "Prediction not added")
        return

    cache.add_prediction(match.id, prediction)
    st.success("Prediction added successfully!")


def render_leaderboard(client: ClientContext) -> None:
    st.header("Leaderboard")
    try:
        entries = client.api.get_leaderboard()
    except BallKnowledgeError as exc:
        _show_error(exc, "Error fetching leaderboard")
        return

    st.dataframe(
        leaderboard_frame(entries), use_container_width=True, hide_index=True
    )


def render_profile(client: ClientContext) -> None:
    st.header("Profile")
    try:
        profile = client.api.get_profile()
    except BallKnowledgeError as exc:
        _show_error(exc, "Error fetching profile")
        return

    st.write(f"**Username:** {profile.username}")
    st.write(f"**Email:** {profile.email}")
    st.write(f"**Predictions made:** {len(client.predictions.index)}")


PUBLIC_VIEWS = {
    HOME_VIEW: ("Home", render_home),
    LOGIN_VIEW: ("Login", render_login),
    "register": ("Register", render_register),
}

GUARDED_VIEWS = {
    "predict": ("Predict", render_predict),
    "matches": ("Matches", render_matches),
    "leaderboard": ("Leaderboard", render_leaderboard),
    "profile": ("Profile", render_profile),
}


def render_sidebar(client: ClientContext) -> None:
    session = client.store.current_session()
    st.sidebar.header("Ball Knowledge")

    entries = [HOME_VIEW]
    if session.is_authenticated:
        entries += list(GUARDED_VIEWS)
    else:
        entries += [LOGIN_VIEW, "register"]

    for view in entries:
        title = {**PUBLIC_VIEWS, **GUARDED_VIEWS}[view][0]
        if st.sidebar.button(title, key=f"nav_{view}"):
            navigate(view)
            st.rerun()

    if session.is_authenticated:
        st.sidebar.caption(f"Logged in as {session.identity.user_id}")
        if st.sidebar.button("Logout"):
            client.api.logout()
            navigate(HOME_VIEW)
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="Ball Knowledge – Football Predictions")
    st.title("⚽ Ball Knowledge")

    client = get_client()
    guard = RouteGuard(client.store, navigate)

    flash = st.session_state.pop(FLASH_KEY, None)
    if flash:
        st.warning(flash)

    render_sidebar(client)

    view = st.session_state.get(VIEW_KEY, HOME_VIEW)
    if view in GUARDED_VIEWS:
        render = GUARDED_VIEWS[view][1]
        if guard.render(lambda: render(client)) is None and (
            st.session_state.get(VIEW_KEY) != view
        ):
            st.rerun()
    else:
        PUBLIC_VIEWS.get(view, PUBLIC_VIEWS[HOME_VIEW])[1](client)


if __name__ == "__main__":
    main()
