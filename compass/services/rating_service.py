from decimal import Decimal
from typing import Iterable
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import NotFoundError
from compass.services.access import get_owned_decision
from compass.services.audit import record_audit

logger = structlog.get_logger()


class RatingService:
    """Rating store: per-user ratings of a decision's alternatives against its criteria."""

    def __init__(self, session: Session):
        self.session = session

    def list_for_decision(self, decision_id: UUID, user_id: UUID) -> list[models.Rating]:
        """Ratings ``user_id`` recorded for ``decision_id``. No ownership check."""
        stmt = select(models.Rating).where(
            models.Rating.decision_id == decision_id,
            models.Rating.user_id == user_id,
        )
        return list(self.session.scalars(stmt))

    def get_ratings(self, decision_id: UUID, user_id: UUID) -> list[models.Rating]:
        get_owned_decision(self.session, decision_id, user_id, action="view ratings for")
        return self.list_for_decision(decision_id, user_id)

    def upsert_rating(
        self,
        decision_id: UUID,
        user_id: UUID,
        alternative_id: UUID,
        criterion_id: UUID,
        value: Decimal,
    ) -> tuple[models.Rating, bool]:
        """Create or overwrite one rating. Returns the row and whether it was created."""
        decision = get_owned_decision(self.session, decision_id, user_id, action="rate", for_update=True)
        self._ensure_pair_in_decision(decision, alternative_id, criterion_id)

        rating = self.session.scalars(
            select(models.Rating).where(
                models.Rating.user_id == user_id,
                models.Rating.decision_id == decision_id,
                models.Rating.alternative_id == alternative_id,
                models.Rating.criterion_id == criterion_id,
            )
        ).first()
        created = rating is None
        if created:
            rating = models.Rating(
                user_id=user_id,
                decision_id=decision_id,
                alternative_id=alternative_id,
                criterion_id=criterion_id,
                value=Decimal(str(value)),
            )
            self.session.add(rating)
        else:
            rating.value = Decimal(str(value))
        self._flush()
        return rating, created

    def upsert_ratings(self, decision_id: UUID, user_id: UUID, items: Iterable[dict]) -> tuple[int, int]:
        """Apply a batch of ``{alternative_id, criterion_id, value}`` upserts. Returns (created, updated)."""
        items = list(items)
        if not items:
            raise ValueError("No ratings provided.")

        decision = get_owned_decision(self.session, decision_id, user_id, action="modify", for_update=True)
        for item in items:
            self._ensure_pair_in_decision(decision, item["alternative_id"], item["criterion_id"])

        existing = {
            (r.alternative_id, r.criterion_id): r for r in self.list_for_decision(decision_id, user_id)
        }
        created = updated = 0
        for item in items:
            key = (item["alternative_id"], item["criterion_id"])
            value = Decimal(str(item["value"]))
            rating = existing.get(key)
            if rating is None:
                rating = models.Rating(
                    user_id=user_id,
                    decision_id=decision_id,
                    alternative_id=key[0],
                    criterion_id=key[1],
                    value=value,
                )
                self.session.add(rating)
                existing[key] = rating
                created += 1
            else:
                rating.value = value
                updated += 1
        self._flush()

        record_audit(
            self.session, user_id, "ratings.save", "Decision", decision_id, {"created": created, "updated": updated}
        )
        logger.info("ratings_saved", decision_id=str(decision_id), created=created, updated=updated)
        return created, updated

    def purge_for_alternative(self, decision_id: UUID, alternative_id: UUID) -> int:
        result = self.session.execute(
            delete(models.Rating).where(
                models.Rating.decision_id == decision_id,
                models.Rating.alternative_id == alternative_id,
            )
        )
        return result.rowcount or 0

    def purge_for_criterion(self, decision_id: UUID, criterion_id: UUID) -> int:
        result = self.session.execute(
            delete(models.Rating).where(
                models.Rating.decision_id == decision_id,
                models.Rating.criterion_id == criterion_id,
            )
        )
        return result.rowcount or 0

    def purge_for_decision(self, decision_id: UUID) -> int:
        result = self.session.execute(delete(models.Rating).where(models.Rating.decision_id == decision_id))
        return result.rowcount or 0

    def _ensure_pair_in_decision(self, decision: models.Decision, alternative_id: UUID, criterion_id: UUID) -> None:
        alternative_ids = {a.id for a in decision.alternatives}
        criterion_ids = {c.id for c in decision.criteria}
        if alternative_id not in alternative_ids or criterion_id not in criterion_ids:
            raise NotFoundError("Alternative or criterion not found within this decision.")

    def _flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValueError("Ratings were modified concurrently; retry the request") from exc
