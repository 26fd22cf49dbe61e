# workforce/routers/boards.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from workforce.database import get_db
from workforce.exceptions import field_error
from workforce.models import Board, Role, Team, User
from workforce.routers.teams import visible_team_ids
from workforce.schemas import BoardCreate, BoardOut
from workforce.utils.access_control import is_privileged
from workforce.utils.auth import get_current_user, require_roles

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("", response_model=List[BoardOut])
def list_boards(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Active boards of the caller's teams (every board for managers and admins)"""
    query = db.query(Board).filter(Board.is_active.is_(True))
    if not is_privileged(current_user.role):
        query = query.filter(Board.team_id.in_(visible_team_ids(db, current_user)))
    return query.order_by(Board.name, Board.id).all()


@router.post("", response_model=BoardOut, status_code=status.HTTP_201_CREATED)
def create_board(
    payload: BoardCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    if db.query(Team.id).filter(Team.id == payload.team_id).first() is None:
        raise field_error("teamId", "Team not found", payload.team_id, code="INVALID_TEAM")

    board = Board(
        team_id=payload.team_id,
        name=payload.name.strip(),
        description=payload.description,
        created_by=current_user.id,
    )
    if payload.color:
        board.color = payload.color
    db.add(board)
    db.commit()
    db.refresh(board)
    return BoardOut.model_validate(board)
