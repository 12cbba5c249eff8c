"""Idempotent seed data: default outcome rules and an optional demo account."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from compass import models
from compass.auth.password import hash_password

DEFAULT_OUTCOME_RULES: dict[str, list[str]] = {
    "career": [
        "Talk to two people already doing the role you are leaning towards.",
        "Compare growth and learning opportunities, not only starting salary.",
    ],
    "purchase": [
        "Wait 48 hours before buying to check the choice still holds.",
        "Re-check the total cost of ownership, including maintenance.",
    ],
    "education": [
        "Look at placement records and alumni outcomes for each program.",
        "Estimate the total cost including living expenses and time off work.",
    ],
    "close-call": [
        "The top alternatives are within a point of each other; revisit your criterion weights.",
        "Add a criterion that captures what still feels unresolved.",
    ],
}


def seed_outcome_rules(session: Session) -> int:
    """Create missing default outcome rules. Returns how many were created."""
    existing = set(session.scalars(select(models.OutcomeRule.tag)))
    created = 0
    for tag, suggestions in DEFAULT_OUTCOME_RULES.items():
        if tag in existing:
            continue
        session.add(models.OutcomeRule(tag=tag, suggestions=list(suggestions)))
        created += 1
    session.flush()
    return created


def seed_demo_user(session: Session, username: str, password: str) -> tuple[models.User, bool]:
    """Create the demo account unless it exists. Returns (user, created)."""
    user = session.scalar(select(models.User).where(models.User.username == username))
    if user is not None:
        return user, False
    user = models.User(username=username, password_hash=hash_password(password))
    session.add(user)
    session.flush()
    return user, True
