from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import NotFoundError
from compass.services.access import get_owned_decision

DUPLICATE_OPTION_MESSAGE = "An option with this name already exists for this decision."


class OptionService:
    """Options carry their own per-criterion scores, independent of the rating store."""

    def __init__(self, session: Session):
        self.session = session

    def list_options(self, decision_id: UUID, user_id: UUID) -> list[models.Option]:
        decision = get_owned_decision(self.session, decision_id, user_id, action="view")
        return list(decision.options)

    def get_option(self, decision_id: UUID, option_id: UUID, user_id: UUID) -> models.Option:
        get_owned_decision(self.session, decision_id, user_id, action="view")
        return self._get_option_or_raise(decision_id, option_id)

    def create_option(
        self,
        decision_id: UUID,
        user_id: UUID,
        name: str,
        description: str | None = None,
        scores: Iterable[dict] = (),
    ) -> models.Option:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        name = name.strip()
        self._ensure_unique_name(decision_id, name)
        option = models.Option(
            decision_id=decision.id,
            user_id=user_id,
            name=name,
            description=(description or "").strip(),
        )
        option.scores = self._build_scores(decision, scores)
        self.session.add(option)
        self._flush()
        return option

    def update_option(
        self, decision_id: UUID, option_id: UUID, user_id: UUID, changes: dict[str, Any]
    ) -> models.Option:
        decision = get_owned_decision(self.session, decision_id, user_id, action="modify")
        option = self._get_option_or_raise(decision_id, option_id)
        if changes.get("name") is not None:
            name = changes["name"].strip()
            if name != option.name:
                self._ensure_unique_name(decision_id, name)
            option.name = name
        if changes.get("description") is not None:
            option.description = changes["description"].strip()
        if changes.get("scores") is not None:
            # Replace wholesale; delete-orphan removes the old rows first
            option.scores.clear()
            self.session.flush()
            option.scores.extend(self._build_scores(decision, changes["scores"]))
        self._flush()
        return option

    def delete_option(self, decision_id: UUID, option_id: UUID, user_id: UUID) -> None:
        get_owned_decision(self.session, decision_id, user_id, action="modify")
        option = self._get_option_or_raise(decision_id, option_id)
        self.session.delete(option)
        self.session.flush()

    def _build_scores(self, decision: models.Decision, scores: Iterable[dict]) -> list[models.OptionScore]:
        criterion_ids = {c.id for c in decision.criteria}
        rows: dict[UUID, models.OptionScore] = {}
        for score in scores:
            criterion_id = UUID(str(score["criterion_id"]))
            if criterion_id not in criterion_ids:
                raise ValueError("Criterion not part of this decision")
            # Last value wins for a repeated criterion
            rows[criterion_id] = models.OptionScore(criterion_id=criterion_id, value=Decimal(str(score["value"])))
        return list(rows.values())

    def _get_option_or_raise(self, decision_id: UUID, option_id: UUID) -> models.Option:
        option = self.session.get(models.Option, option_id)
        if option is None or option.decision_id != decision_id:
            raise NotFoundError("Option not found")
        return option

    def _ensure_unique_name(self, decision_id: UUID, name: str) -> None:
        existing = self.session.scalar(
            select(models.Option.id).where(models.Option.decision_id == decision_id, models.Option.name == name)
        )
        if existing is not None:
            raise ValueError(DUPLICATE_OPTION_MESSAGE)

    def _flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            self.session.rollback()
            raise ValueError(DUPLICATE_OPTION_MESSAGE) from exc
