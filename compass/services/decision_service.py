from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import NotFoundError
from compass.services.access import get_owned_decision
from compass.services.audit import record_audit
from compass.services.rating_service import RatingService


class DecisionService:
    """Business logic for decisions and their alternatives and criteria."""

    def __init__(self, session: Session):
        self.session = session
        self.ratings = RatingService(session)

    # Decisions
    def list_decisions(self, user_id: UUID, skip: int = 0, limit: int = 100) -> list[models.Decision]:
        stmt = (
            select(models.Decision)
            .where(models.Decision.user_id == user_id)
            .order_by(models.Decision.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def create_decision(self, user_id: UUID, title: str, description: str | None = None) -> models.Decision:
        title = title.strip()
        if len(title) < 3:
            raise ValueError("Decision title is required.")
        decision = models.Decision(user_id=user_id, title=title, description=(description or "").strip())
        self.session.add(decision)
        self.session.flush()
        record_audit(self.session, user_id, "decision.create", "Decision", decision.id, {"title": title})
        return decision

    def get_decision(self, decision_id: UUID, user_id: UUID) -> models.Decision:
        return get_owned_decision(self.session, decision_id, user_id, action="view")

    def update_decision(self, decision_id: UUID, user_id: UUID, changes: dict[str, Any]) -> models.Decision:
        decision = get_owned_decision(self.session, decision_id, user_id, action="update")
        if changes.get("title") is not None:
            decision.title = changes["title"].strip()
        if changes.get("description") is not None:
            decision.description = changes["description"].strip()
        self.session.flush()
        return decision

    def delete_decision(self, decision_id: UUID, user_id: UUID) -> None:
        decision = get_owned_decision(self.session, decision_id, user_id, action="delete", for_update=True)
        purged = self.ratings.purge_for_decision(decision_id)
        self.session.delete(decision)
        self.session.flush()
        record_audit(self.session, user_id, "decision.delete", "Decision", decision_id, {"ratings_purged": purged})

    # Alternatives
    def list_alternatives(self, decision_id: UUID, user_id: UUID) -> list[models.Alternative]:
        return list(get_owned_decision(self.session, decision_id, user_id, action="view").alternatives)

    def add_alternative(
        self, decision_id: UUID, user_id: UUID, name: str, description: str | None = None
    ) -> models.Alternative:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        name = name.strip()
        if not name:
            raise ValueError("Alternative name is required.")
        alternative = models.Alternative(
            name=name,
            description=description,
            position=self._next_position(decision.alternatives),
            score=Decimal("0"),
        )
        decision.alternatives.append(alternative)
        self.session.flush()
        return alternative

    def update_alternative(
        self, decision_id: UUID, alternative_id: UUID, user_id: UUID, changes: dict[str, Any]
    ) -> models.Alternative:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        alternative = self._find(decision.alternatives, alternative_id, "Alternative not found.")
        if changes.get("name") is not None:
            name = changes["name"].strip()
            if not name:
                raise ValueError("Alternative name is required.")
            alternative.name = name
        if "description" in changes:
            alternative.description = changes["description"]
        self.session.flush()
        return alternative

    def delete_alternative(self, decision_id: UUID, alternative_id: UUID, user_id: UUID) -> int:
        """Remove an alternative and every rating of it. Returns the number of ratings purged."""
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify", for_update=True)
        alternative = self._find(decision.alternatives, alternative_id, "Alternative not found.")
        purged = self.ratings.purge_for_alternative(decision_id, alternative_id)
        decision.alternatives.remove(alternative)
        self.session.flush()
        return purged

    # Criteria
    def list_criteria(self, decision_id: UUID, user_id: UUID) -> list[models.Criterion]:
        return list(get_owned_decision(self.session, decision_id, user_id, action="view").criteria)

    def get_criterion(self, decision_id: UUID, criterion_id: UUID, user_id: UUID) -> models.Criterion:
        decision = get_owned_decision(self.session, decision_id, user_id, action="view")
        return self._find(decision.criteria, criterion_id, "Criterion not found.")

    def add_criterion(
        self,
        decision_id: UUID,
        user_id: UUID,
        name: str,
        weight: Decimal | None = None,
        description: str | None = None,
    ) -> models.Criterion:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        name = name.strip()
        if not name:
            raise ValueError("Criterion name is required.")
        self._ensure_unique_criterion_name(decision, name)
        criterion = models.Criterion(
            name=name,
            description=description,
            weight=Decimal(str(weight)) if weight is not None else Decimal("1"),
            position=self._next_position(decision.criteria),
        )
        decision.criteria.append(criterion)
        self._flush_unique("A criterion with this name already exists for this decision.")
        return criterion

    def update_criterion(
        self, decision_id: UUID, criterion_id: UUID, user_id: UUID, changes: dict[str, Any]
    ) -> models.Criterion:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        criterion = self._find(decision.criteria, criterion_id, "Criterion not found.")
        if changes.get("name") is not None:
            name = changes["name"].strip()
            if not name:
                raise ValueError("Criterion name is required.")
            if name != criterion.name:
                self._ensure_unique_criterion_name(decision, name)
            criterion.name = name
        if changes.get("weight") is not None:
            criterion.weight = Decimal(str(changes["weight"]))
        if "description" in changes:
            criterion.description = changes["description"]
        self._flush_unique("A criterion with this name already exists for this decision.")
        return criterion

    def delete_criterion(self, decision_id: UUID, criterion_id: UUID, user_id: UUID) -> int:
        """Remove a criterion, its ratings and any option scores against it. Returns ratings purged."""
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify", for_update=True)
        criterion = self._find(decision.criteria, criterion_id, "Criterion not found.")
        purged = self.ratings.purge_for_criterion(decision_id, criterion_id)
        self.session.execute(delete(models.OptionScore).where(models.OptionScore.criterion_id == criterion_id))
        decision.criteria.remove(criterion)
        self.session.flush()
        return purged

    # Helpers
    @staticmethod
    def _next_position(items: list) -> int:
        return max((item.position for item in items), default=-1) + 1

    @staticmethod
    def _find(items: list, item_id: UUID, message: str):
        for item in items:
            if item.id == item_id:
                return item
        raise NotFoundError(message)

    @staticmethod
    def _ensure_unique_criterion_name(decision: models.Decision, name: str) -> None:
        if any(c.name == name for c in decision.criteria):
            raise ValueError("A criterion with this name already exists for this decision.")

    def _flush_unique(self, message: str) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValueError(message) from exc
