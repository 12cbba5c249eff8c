from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from compass.api.deps import transactional
from compass.auth.jwt import get_current_user
from compass.db.session import get_session
from compass.models.domain import User
from compass.schemas.base import (
    AlternativeCreate,
    AlternativeRead,
    AlternativeScoreRead,
    AlternativeUpdate,
    CriterionCreate,
    CriterionRead,
    CriterionUpdate,
    DecisionCreate,
    DecisionRead,
    DecisionSummary,
    DecisionUpdate,
    MessageResponse,
    RatingBatchRequest,
    RatingBatchResult,
    RatingInput,
    RatingRead,
    ScoreReport,
)
from compass.services.decision_service import DecisionService
from compass.services.rating_service import RatingService
from compass.services.scoring_service import ScoringService

router = APIRouter()


# Health check endpoint (no auth required)
@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "decision-compass"}


# Decisions
@router.get("/decisions", response_model=List[DecisionSummary])
def list_decisions(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[DecisionSummary]:
    """List the caller's decisions, newest first."""
    decisions = DecisionService(db).list_decisions(current_user.id, skip=skip, limit=limit)
    return [DecisionSummary.model_validate(d) for d in decisions]


@router.post("/decisions", response_model=DecisionRead, status_code=status.HTTP_201_CREATED)
def create_decision(
    decision_data: DecisionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> DecisionRead:
    with transactional(db):
        decision = DecisionService(db).create_decision(
            current_user.id, decision_data.title, decision_data.description
        )
    return DecisionRead.model_validate(decision)


@router.get("/decisions/{decision_id}", response_model=DecisionRead)
def get_decision(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> DecisionRead:
    with transactional(db, commit=False):
        decision = DecisionService(db).get_decision(decision_id, current_user.id)
        return DecisionRead.model_validate(decision)


@router.put("/decisions/{decision_id}", response_model=DecisionRead)
def update_decision(
    decision_id: UUID,
    decision_update: DecisionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> DecisionRead:
    with transactional(db):
        decision = DecisionService(db).update_decision(
            decision_id, current_user.id, decision_update.model_dump(exclude_unset=True)
        )
    return DecisionRead.model_validate(decision)


@router.delete("/decisions/{decision_id}", response_model=MessageResponse)
def delete_decision(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    """Delete a decision together with its alternatives, criteria, options and ratings."""
    with transactional(db):
        DecisionService(db).delete_decision(decision_id, current_user.id)
    return MessageResponse(message="Decision removed")


# Alternatives
@router.get("/decisions/{decision_id}/alternatives", response_model=List[AlternativeRead])
def list_alternatives(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[AlternativeRead]:
    with transactional(db, commit=False):
        alternatives = DecisionService(db).list_alternatives(decision_id, current_user.id)
        return [AlternativeRead.model_validate(a) for a in alternatives]


@router.post(
    "/decisions/{decision_id}/alternatives",
    response_model=AlternativeRead,
    status_code=status.HTTP_201_CREATED,
)
def add_alternative(
    decision_id: UUID,
    alternative_data: AlternativeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> AlternativeRead:
    with transactional(db):
        alternative = DecisionService(db).add_alternative(
            decision_id, current_user.id, alternative_data.name, alternative_data.description
        )
    return AlternativeRead.model_validate(alternative)


@router.put("/decisions/{decision_id}/alternatives/{alternative_id}", response_model=AlternativeRead)
def update_alternative(
    decision_id: UUID,
    alternative_id: UUID,
    alternative_update: AlternativeUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> AlternativeRead:
    with transactional(db):
        alternative = DecisionService(db).update_alternative(
            decision_id, alternative_id, current_user.id, alternative_update.model_dump(exclude_unset=True)
        )
    return AlternativeRead.model_validate(alternative)


@router.delete("/decisions/{decision_id}/alternatives/{alternative_id}", response_model=MessageResponse)
def delete_alternative(
    decision_id: UUID,
    alternative_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    """Remove an alternative; its ratings are deleted in the same transaction."""
    with transactional(db):
        DecisionService(db).delete_alternative(decision_id, alternative_id, current_user.id)
    return MessageResponse(message="Alternative removed successfully.")


# Criteria
@router.get("/decisions/{decision_id}/criteria", response_model=List[CriterionRead])
def list_criteria(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[CriterionRead]:
    with transactional(db, commit=False):
        criteria = DecisionService(db).list_criteria(decision_id, current_user.id)
        return [CriterionRead.model_validate(c) for c in criteria]


@router.get("/decisions/{decision_id}/criteria/{criterion_id}", response_model=CriterionRead)
def get_criterion(
    decision_id: UUID,
    criterion_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CriterionRead:
    with transactional(db, commit=False):
        criterion = DecisionService(db).get_criterion(decision_id, criterion_id, current_user.id)
        return CriterionRead.model_validate(criterion)


@router.post(
    "/decisions/{decision_id}/criteria",
    response_model=CriterionRead,
    status_code=status.HTTP_201_CREATED,
)
def add_criterion(
    decision_id: UUID,
    criterion_data: CriterionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CriterionRead:
    with transactional(db):
        criterion = DecisionService(db).add_criterion(
            decision_id,
            current_user.id,
            criterion_data.name,
            weight=criterion_data.weight,
            description=criterion_data.description,
        )
    return CriterionRead.model_validate(criterion)


@router.put("/decisions/{decision_id}/criteria/{criterion_id}", response_model=CriterionRead)
def update_criterion(
    decision_id: UUID,
    criterion_id: UUID,
    criterion_update: CriterionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CriterionRead:
    with transactional(db):
        criterion = DecisionService(db).update_criterion(
            decision_id, criterion_id, current_user.id, criterion_update.model_dump(exclude_unset=True)
        )
    return CriterionRead.model_validate(criterion)


@router.delete("/decisions/{decision_id}/criteria/{criterion_id}", response_model=MessageResponse)
def delete_criterion(
    decision_id: UUID,
    criterion_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    """Remove a criterion; its ratings and option scores are deleted in the same transaction."""
    with transactional(db):
        DecisionService(db).delete_criterion(decision_id, criterion_id, current_user.id)
    return MessageResponse(message="Criterion removed successfully.")


# Ratings
@router.get("/decisions/{decision_id}/ratings", response_model=List[RatingRead])
def get_ratings(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[RatingRead]:
    """Ratings the caller recorded for this decision."""
    with transactional(db, commit=False):
        ratings = RatingService(db).get_ratings(decision_id, current_user.id)
        return [RatingRead.model_validate(r) for r in ratings]


@router.post("/decisions/{decision_id}/ratings", response_model=RatingBatchResult)
def save_ratings(
    decision_id: UUID,
    batch: RatingBatchRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> RatingBatchResult:
    """Create or overwrite a batch of ratings in one transaction."""
    with transactional(db):
        created, updated = RatingService(db).upsert_ratings(
            decision_id, current_user.id, [r.model_dump() for r in batch.ratings]
        )
    return RatingBatchResult(message="Ratings saved successfully", created=created, updated=updated)


@router.put("/decisions/{decision_id}/ratings", response_model=RatingRead)
def save_rating(
    decision_id: UUID,
    rating_data: RatingInput,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> RatingRead:
    """Create (201) or overwrite (200) a single rating."""
    with transactional(db):
        rating, created = RatingService(db).upsert_rating(
            decision_id,
            current_user.id,
            rating_data.alternative_id,
            rating_data.criterion_id,
            rating_data.value,
        )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return RatingRead.model_validate(rating)


# Scores
@router.post("/decisions/{decision_id}/calculate-scores", response_model=ScoreReport)
def calculate_scores(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ScoreReport:
    """Recompute every alternative's weighted score and the decision's overall score."""
    with transactional(db):
        outcome = ScoringService(db).calculate_scores(decision_id, current_user.id)
    return ScoreReport(
        decision_id=outcome.decision.id,
        title=outcome.decision.title,
        alternatives=[
            AlternativeScoreRead(id=item.alternative_id, name=item.name, score=float(item.score))
            for item in outcome.result.alternatives
        ],
        overall_score=float(outcome.result.overall),
        message=outcome.message,
    )
