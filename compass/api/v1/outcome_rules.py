from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from compass.api.deps import transactional
from compass.auth.jwt import get_current_user
from compass.db.session import get_session
from compass.models.domain import User
from compass.schemas.base import (
    MessageResponse,
    OutcomeRuleCreate,
    OutcomeRuleRead,
    OutcomeRuleUpdate,
    SuggestionsRead,
)
from compass.services.outcome_rule_service import OutcomeRuleService

router = APIRouter(prefix="/outcome-rules", tags=["outcome-rules"])


@router.get("", response_model=List[OutcomeRuleRead])
def list_outcome_rules(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[OutcomeRuleRead]:
    return [OutcomeRuleRead.model_validate(r) for r in OutcomeRuleService(db).list_rules()]


@router.post("", response_model=OutcomeRuleRead, status_code=status.HTTP_201_CREATED)
def create_outcome_rule(
    rule_data: OutcomeRuleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> OutcomeRuleRead:
    with transactional(db):
        rule = OutcomeRuleService(db).create_rule(rule_data.tag, rule_data.suggestions, actor_user_id=current_user.id)
    return OutcomeRuleRead.model_validate(rule)


@router.get("/{tag}/suggestions", response_model=SuggestionsRead)
def get_suggestions(
    tag: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuggestionsRead:
    """Suggestions registered for ``tag``."""
    with transactional(db, commit=False):
        rule = OutcomeRuleService(db).get_suggestions(tag)
        return SuggestionsRead(tag=rule.tag, suggestions=rule.suggestions)


@router.put("/{tag}", response_model=OutcomeRuleRead)
def update_outcome_rule(
    tag: str,
    rule_update: OutcomeRuleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> OutcomeRuleRead:
    with transactional(db):
        rule = OutcomeRuleService(db).update_rule(tag, rule_update.suggestions)
    return OutcomeRuleRead.model_validate(rule)


@router.delete("/{tag}", response_model=MessageResponse)
def delete_outcome_rule(
    tag: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    with transactional(db):
        OutcomeRuleService(db).delete_rule(tag)
    return MessageResponse(message="Outcome rule removed.")
