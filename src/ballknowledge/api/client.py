"""
Endpoint functions for the Ball Knowledge API.

Endpoints:
- POST /login                 -> {"token": ...}
- POST /register              -> {"token"?: ..., "user"?: ...}
- GET  /matches               -> {"data": [Match, ...]}
- GET  /matches/{gameweek}    -> {"data": [Match, ...], "gameweek": ...}
- GET  /matches/details/{id}  -> {"match": Match, "prediction_count": ...}
- GET  /leaderboard           -> {"data" | "leaderboard": [Entry, ...]}
- GET  /profile               -> {"data" | "user": Profile}
- POST /predictions           -> {"prediction" | "data": Prediction}
- GET  /predictions/{match}   -> {"prediction" | "data": Prediction}
- PUT  /predictions/{id}      -> {"prediction": Prediction}
- GET  /my-predictions        -> {"predictions": [Prediction, ...]}
- POST /refresh-token         -> {"token": ...}
- GET  /health                -> {"status": "OK", ...}

All requests go through the `AuthorizedRequestPipeline`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ballknowledge.api.models import (
    LeaderboardEntry,
    LoginRequest,
    Match,
    MatchDetails,
    Prediction,
    PredictionCreate,
    PredictionUpdate,
    Profile,
    RegisterRequest,
)
from ballknowledge.api.pipeline import AuthorizedRequestPipeline
from ballknowledge.auth.errors import RequestFailed, UnexpectedResponse
from ballknowledge.utils.logging_utils import get_logger

logger = get_logger(__name__)


def _unwrap(payload: Any, *keys: str) -> Any:
    """Return the first of `keys` present in a response body."""
    if isinstance(payload, dict):
        for key in keys:
            if key in payload and payload[key] is not None:
                return payload[key]
    raise UnexpectedResponse(payload, keys)


class ApiClient:
    """Thin wrapper exposing one method per backend endpoint."""

    def __init__(self, pipeline: AuthorizedRequestPipeline):
        self.pipeline = pipeline

    @property
    def store(self):
        return self.pipeline.store

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login_user(self, username_or_email: str, password: str) -> str:
        """Exchange username/email + password for a credential (not stored)."""
        payload = LoginRequest(username_or_email=username_or_email, password=password)
        data = self.pipeline.post("/login", json=payload.model_dump(by_alias=True))
        return str(_unwrap(data, "token"))

    def login(self, username_or_email: str, password: str):
        """Log in against the API and install the credential in the session store."""
        token = self.login_user(username_or_email, password)
        return self.store.login(token)

    def register_user(self, username: str, email: str, password: str) -> Dict[str, Any]:
        payload = RegisterRequest(username=username, email=email, password=password)
        data = self.pipeline.post("/register", json=payload.model_dump())
        return data if isinstance(data, dict) else {}

    def refresh_token(self):
        """Ask the API for a fresh credential and log it in."""
        data = self.pipeline.post("/refresh-token")
        return self.store.login(str(_unwrap(data, "token")))

    def logout(self) -> None:
        self.store.logout()

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def get_matches(self) -> List[Match]:
        data = self.pipeline.get("/matches")
        return [Match.model_validate(m) for m in _unwrap(data, "data")]

    def get_matches_for_gameweek(self, gameweek: int) -> List[Match]:
        data = self.pipeline.get(f"/matches/{int(gameweek)}")
        return [Match.model_validate(m) for m in _unwrap(data, "data")]

    def get_match_details(self, match_id: str) -> MatchDetails:
        data = self.pipeline.get(f"/matches/details/{match_id}")
        return MatchDetails.model_validate(data)

    # ------------------------------------------------------------------
    # Leaderboard / profile
    # ------------------------------------------------------------------

    def get_leaderboard(self) -> List[LeaderboardEntry]:
        data = self.pipeline.get("/leaderboard")
        return [
            LeaderboardEntry.model_validate(e)
            for e in _unwrap(data, "data", "leaderboard")
        ]

    def get_profile(self) -> Profile:
        data = self.pipeline.get("/profile")
        return Profile.model_validate(_unwrap(data, "data", "user"))

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    def create_prediction(
        self, match_id: str, predicted_score_home: int, predicted_score_away: int
    ) -> Prediction:
        payload = PredictionCreate(
            match_id=match_id,
            predicted_score_home=predicted_score_home,
            predicted_score_away=predicted_score_away,
        )
        data = self.pipeline.post("/predictions", json=payload.model_dump())
        try:
            return Prediction.model_validate(_unwrap(data, "prediction", "data"))
        except UnexpectedResponse:
            # Older backends answer with a bare message; echo what was sent
            logger.debug("Create prediction response had no body; using payload.")
            return Prediction.model_validate(payload.model_dump())

    def update_prediction(
        self, prediction_id: str, predicted_score_home: int, predicted_score_away: int
    ) -> Prediction:
        payload = PredictionUpdate(
            predicted_score_home=predicted_score_home,
            predicted_score_away=predicted_score_away,
        )
        data = self.pipeline.put(f"/predictions/{prediction_id}", json=payload.model_dump())
        return Prediction.model_validate(_unwrap(data, "prediction", "data"))

    def get_prediction(self, match_id: str) -> Optional[Prediction]:
        """Return the user's prediction for a match, or None if there is none."""
        try:
            data = self.pipeline.get(f"/predictions/{match_id}")
        except RequestFailed as exc:
            if exc.status == 404:
                return None
            raise
        return Prediction.model_validate(_unwrap(data, "prediction", "data"))

    def get_user_predictions(self) -> List[Prediction]:
        data = self.pipeline.get("/my-predictions")
        if isinstance(data, dict) and data.get("predictions") is None:
            return []
        return [Prediction.model_validate(p) for p in _unwrap(data, "predictions")]

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def health(self) -> Dict[str, Any]:
        data = self.pipeline.get("/health")
        return data if isinstance(data, dict) else {}
