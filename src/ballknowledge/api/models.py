"""
Pydantic models for Ball Knowledge API payloads and responses.

Field names follow the backend's JSON (snake_case), except the login payload
which the backend expects as `usernameOrEmail`.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field


def _id_to_str(value: Any) -> Any:
    # The backend uses UUIDs, but fixtures and older endpoints send integers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value


IdStr = Annotated[str, BeforeValidator(_id_to_str)]


class Match(BaseModel):
    """Read-only projection of a scheduled match."""

    model_config = ConfigDict(extra="ignore")

    id: IdStr
    home_team: str
    away_team: str
    date: Optional[str] = None
    league: Optional[str] = None
    season: Optional[str] = None
    match_day: Optional[int] = None
    result: Optional[str] = None

    @property
    def kickoff_time(self) -> Optional[str]:
        return self.date

    @property
    def label(self) -> str:
        text = f"{self.home_team} vs {self.away_team}"
        if self.date:
            text += f" - {self.date}"
        return text


class Prediction(BaseModel):
    """A user's predicted score for one match."""

    model_config = ConfigDict(extra="ignore")

    match_id: IdStr
    predicted_score_home: int
    predicted_score_away: int
    id: Optional[IdStr] = None
    user_id: Optional[IdStr] = None
    points: int = 0


class PredictionCreate(BaseModel):
    match_id: IdStr
    predicted_score_home: int = Field(ge=0)
    predicted_score_away: int = Field(ge=0)


class PredictionUpdate(BaseModel):
    predicted_score_home: int = Field(ge=0)
    predicted_score_away: int = Field(ge=0)


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(alias="usernameOrEmail", min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: IdStr
    username: str
    # The leaderboard handler aggregates as total_points, older builds sent points
    points: int = Field(0, validation_alias=AliasChoices("points", "total_points"))
    prediction_count: int = 0


class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str
    email: str
    id: Optional[IdStr] = None


class MatchDetails(BaseModel):
    match: Match
    prediction_count: int = 0
