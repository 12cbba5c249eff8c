from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, condecimal

# Columns are NUMERIC(p, 2); a third decimal place is a validation error
RatingValue = condecimal(ge=0, le=10, decimal_places=2)
WeightValue = condecimal(ge=0, le=Decimal("9999.99"), decimal_places=2)


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Authentication schemas
class RegisterRequest(BaseSchema):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseSchema):
    username: str = Field(..., max_length=50)
    password: str


class UserRead(BaseSchema):
    id: UUID
    username: str
    created_at: datetime


class TokenResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead


class MessageResponse(BaseSchema):
    message: str


# Alternatives
class AlternativeCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class AlternativeUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class AlternativeRead(BaseSchema):
    id: UUID
    decision_id: UUID
    name: str
    description: Optional[str] = None
    position: int
    score: float
    created_at: datetime
    updated_at: datetime


# Criteria
class CriterionCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    weight: Optional[WeightValue] = Field(Decimal("1"), description="Relative importance; defaults to 1")


class CriterionUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    weight: Optional[WeightValue] = None


class CriterionRead(BaseSchema):
    id: UUID
    decision_id: UUID
    name: str
    description: Optional[str] = None
    position: int
    weight: Optional[float] = None
    created_at: datetime
    updated_at: datetime


# Decisions
class DecisionCreate(BaseSchema):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field("", max_length=1000)


class DecisionUpdate(BaseSchema):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)


class DecisionSummary(BaseSchema):
    id: UUID
    user_id: UUID
    title: str
    description: str
    overall_score: float
    created_at: datetime
    updated_at: datetime


class DecisionRead(DecisionSummary):
    alternatives: List[AlternativeRead] = []
    criteria: List[CriterionRead] = []


# Ratings
class RatingInput(BaseSchema):
    alternative_id: UUID
    criterion_id: UUID
    value: RatingValue


class RatingBatchRequest(BaseSchema):
    ratings: List[RatingInput]


class RatingRead(BaseSchema):
    id: UUID
    user_id: UUID
    decision_id: UUID
    alternative_id: UUID
    criterion_id: UUID
    value: float
    created_at: datetime
    updated_at: datetime


class RatingBatchResult(BaseSchema):
    message: str
    created: int
    updated: int


# Scores
class AlternativeScoreRead(BaseSchema):
    id: UUID
    name: str
    score: float


class ScoreReport(BaseSchema):
    decision_id: UUID
    title: str
    alternatives: List[AlternativeScoreRead]
    overall_score: float
    message: Optional[str] = None


# Options
class OptionScoreInput(BaseSchema):
    criterion_id: UUID
    value: RatingValue


class OptionScoreRead(OptionScoreInput):
    value: float


class OptionCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field("", max_length=500)
    scores: List[OptionScoreInput] = []


class OptionUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    scores: Optional[List[OptionScoreInput]] = None


class OptionRead(BaseSchema):
    id: UUID
    decision_id: UUID
    user_id: UUID
    name: str
    description: str
    scores: List[OptionScoreRead] = []
    created_at: datetime
    updated_at: datetime


# Outcome rules
class OutcomeRuleCreate(BaseSchema):
    tag: str = Field(..., min_length=1, max_length=100)
    suggestions: List[str] = Field(default_factory=list)


class OutcomeRuleUpdate(BaseSchema):
    suggestions: List[str]


class OutcomeRuleRead(BaseSchema):
    id: UUID
    tag: str
    suggestions: List[str]
    created_at: datetime
    updated_at: datetime


class SuggestionsRead(BaseSchema):
    tag: str
    suggestions: List[str]
