"""
DataFrame builders for the tables shown in the Streamlit views.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from ballknowledge.api.models import LeaderboardEntry, Match, Prediction

LEADERBOARD_COLUMNS: List[str] = ["Rank", "Username", "Points"]
MATCH_COLUMNS: List[str] = ["Home", "Away", "Kickoff", "Your prediction"]


def leaderboard_frame(entries: Sequence[LeaderboardEntry]) -> pd.DataFrame:
    """
    Build the leaderboard table.

    The server has already ranked the entries; rank is just the position in
    the list it returned.
    """
    rows = [
        {"Rank": rank, "Username": e.username, "Points": e.points}
        for rank, e in enumerate(entries, start=1)
    ]
    return pd.DataFrame(rows, columns=LEADERBOARD_COLUMNS)


def _format_kickoff(value: str | None) -> str:
    if not value:
        return ""
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return value
    return ts.strftime("%Y-%m-%d %H:%M")


def matches_frame(
    matches: Sequence[Match],
    predictions: Dict[str, Prediction] | None = None,
) -> pd.DataFrame:
    """
    Build the matches table, marking matches the user already predicted.

    Parameters
    ----------
    matches : Sequence[Match]
        Matches as returned by the API.
    predictions : Dict[str, Prediction] | None
        Prediction index keyed by match id.
    """
    predictions = predictions or {}
    rows = []
    for m in matches:
        p = predictions.get(m.id)
        rows.append(
            {
                "Home": m.home_team,
                "Away": m.away_team,
                "Kickoff": _format_kickoff(m.kickoff_time),
                "Your prediction": (
                    f"{p.predicted_score_home}-{p.predicted_score_away}" if p else ""
                ),
            }
        )
    return pd.DataFrame(rows, columns=MATCH_COLUMNS)


def open_matches(
    matches: Sequence[Match], predictions: Dict[str, Prediction]
) -> List[Match]:
    """Matches that can still get a prediction from this user."""
    return [m for m in matches if m.id not in predictions]
