from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import InvalidInputError
from compass.services import scoring
from compass.services.access import get_owned_decision
from compass.services.audit import record_audit
from compass.services.rating_service import RatingService

logger = structlog.get_logger()

NO_RATINGS_MESSAGE = "No ratings found. Scores are 0."


@dataclass(frozen=True)
class ScoreOutcome:
    decision: models.Decision
    result: scoring.ScoreResult
    ratings_found: bool

    @property
    def message(self) -> str | None:
        return None if self.ratings_found else NO_RATINGS_MESSAGE


class ScoringService:
    """Recalculates and stores a decision's alternative scores."""

    def __init__(self, session: Session):
        self.session = session
        self.ratings = RatingService(session)

    def calculate_scores(self, decision_id: UUID, user_id: UUID) -> ScoreOutcome:
        # Holding the row lock keeps a concurrent rating batch from landing between read and write
        decision = get_owned_decision(
            self.session, decision_id, user_id, action="calculate scores for", for_update=True
        )
        alternatives = list(decision.alternatives)
        criteria = list(decision.criteria)
        if not alternatives or not criteria:
            raise InvalidInputError(
                "Please add alternatives and criteria to calculate outcome.",
                details={"alternatives": len(alternatives), "criteria": len(criteria)},
            )

        ratings = self.ratings.list_for_decision(decision_id, user_id)
        result = scoring.calculate(alternatives, criteria, ratings)

        by_id = {alternative.id: alternative for alternative in alternatives}
        for item in result.alternatives:
            by_id[item.alternative_id].score = item.score
        decision.overall_score = result.overall
        self.session.flush()

        record_audit(
            self.session,
            user_id,
            "scores.calculate",
            "Decision",
            decision_id,
            {"overall_score": str(result.overall), "ratings": len(ratings)},
        )
        logger.info(
            "scores_calculated",
            decision_id=str(decision_id),
            alternatives=len(alternatives),
            criteria=len(criteria),
            ratings=len(ratings),
            overall_score=float(result.overall),
        )
        return ScoreOutcome(decision=decision, result=result, ratings_found=bool(ratings))
