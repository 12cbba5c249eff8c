from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import NotFoundError
from compass.services.audit import record_audit


def clean_suggestions(suggestions: Iterable[str]) -> list[str]:
    return [s.strip() for s in suggestions if s and s.strip()]


class OutcomeRuleService:
    """Tag -> suggestions lookup table."""

    def __init__(self, session: Session):
        self.session = session

    def list_rules(self) -> list[models.OutcomeRule]:
        return list(self.session.scalars(select(models.OutcomeRule).order_by(models.OutcomeRule.tag)))

    def create_rule(self, tag: str, suggestions: Iterable[str], actor_user_id: UUID | None = None) -> models.OutcomeRule:
        tag = tag.strip()
        if not tag:
            raise ValueError("Tag is required")
        if self._find(tag) is not None:
            raise ValueError("An outcome rule with this tag already exists. Consider updating it.")
        rule = models.OutcomeRule(tag=tag, suggestions=clean_suggestions(suggestions))
        self.session.add(rule)
        self.session.flush()
        record_audit(self.session, actor_user_id, "outcome_rule.create", "OutcomeRule", rule.id, {"tag": tag})
        return rule

    def get_suggestions(self, tag: str) -> models.OutcomeRule:
        rule = self._find(tag)
        if rule is None:
            raise NotFoundError("No suggestions found for this tag.")
        return rule

    def update_rule(self, tag: str, suggestions: Iterable[str]) -> models.OutcomeRule:
        rule = self._find(tag)
        if rule is None:
            raise NotFoundError("Outcome rule not found.")
        # Reassign so the JSON column is flagged dirty
        rule.suggestions = clean_suggestions(suggestions)
        self.session.flush()
        return rule

    def delete_rule(self, tag: str) -> None:
        rule = self._find(tag)
        if rule is None:
            raise NotFoundError("Outcome rule not found.")
        self.session.delete(rule)
        self.session.flush()

    def _find(self, tag: str) -> models.OutcomeRule | None:
        return self.session.scalar(select(models.OutcomeRule).where(models.OutcomeRule.tag == tag.strip()))
