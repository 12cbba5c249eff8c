from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from compass.api.deps import transactional
from compass.auth.jwt import get_current_user
from compass.db.session import get_session
from compass.models.domain import User
from compass.schemas.base import MessageResponse, OptionCreate, OptionRead, OptionUpdate
from compass.services.option_service import OptionService

router = APIRouter(prefix="/decisions/{decision_id}/options", tags=["options"])


@router.get("", response_model=List[OptionRead])
def list_options(
    decision_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> List[OptionRead]:
    with transactional(db, commit=False):
        options = OptionService(db).list_options(decision_id, current_user.id)
        return [OptionRead.model_validate(o) for o in options]


@router.post("", response_model=OptionRead, status_code=status.HTTP_201_CREATED)
def create_option(
    decision_id: UUID,
    option_data: OptionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> OptionRead:
    with transactional(db):
        option = OptionService(db).create_option(
            decision_id,
            current_user.id,
            option_data.name,
            description=option_data.description,
            scores=[s.model_dump() for s in option_data.scores],
        )
    return OptionRead.model_validate(option)


@router.get("/{option_id}", response_model=OptionRead)
def get_option(
    decision_id: UUID,
    option_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> OptionRead:
    with transactional(db, commit=False):
        option = OptionService(db).get_option(decision_id, option_id, current_user.id)
        return OptionRead.model_validate(option)


@router.put("/{option_id}", response_model=OptionRead)
def update_option(
    decision_id: UUID,
    option_id: UUID,
    option_update: OptionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> OptionRead:
    with transactional(db):
        option = OptionService(db).update_option(
            decision_id, option_id, current_user.id, option_update.model_dump(exclude_unset=True)
        )
    return OptionRead.model_validate(option)


@router.delete("/{option_id}", response_model=MessageResponse)
def delete_option(
    decision_id: UUID,
    option_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> MessageResponse:
    with transactional(db):
        OptionService(db).delete_option(decision_id, option_id, current_user.id)
    return MessageResponse(message="Option removed")
