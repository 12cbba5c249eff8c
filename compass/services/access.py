from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from compass import models
from compass.core.errors import NotFoundError


def get_owned_decision(
    session: Session,
    decision_id: UUID,
    user_id: UUID,
    action: str = "access",
    for_update: bool = False,
) -> models.Decision:
    """Load a decision owned by ``user_id``.

    With ``for_update`` the decision row is locked until the transaction ends;
    rating writes and score recalculation for one decision serialize on it.
    """
    stmt = select(models.Decision).where(models.Decision.id == decision_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    decision = session.scalars(stmt).first()
    if decision is None:
        raise NotFoundError("Decision not found")
    if decision.user_id != user_id:
        raise PermissionError(f"Not authorized to {action} this decision")
    return decision
