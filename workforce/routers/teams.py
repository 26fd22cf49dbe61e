# workforce/routers/teams.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from workforce.database import get_db
from workforce.exceptions import ConflictError, NotFoundError, field_error
from workforce.models import NotificationType, Role, Team, TeamMember, User, UserStatus
from workforce.schemas import TeamCreate, TeamMemberAdd, TeamOut
from workforce.utils.access_control import is_privileged
from workforce.utils.auth import get_current_user, require_roles
from workforce.utils.notifications import create_notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"])


def visible_team_ids(db: Session, user: User):
    """Ids of the teams a user belongs to or manages"""
    member_of = db.query(TeamMember.team_id).filter(TeamMember.user_id == user.id)
    managed = db.query(Team.id).filter(Team.manager_id == user.id)
    return [row[0] for row in member_of.union(managed).all()]


def _active_user(db: Session, user_id: int, field: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or user.status != UserStatus.ACTIVE:
        raise field_error(field, "User not found or inactive", user_id, code="INVALID_USER")
    return user


def _notify_added(db: Session, team: Team, user_id: int) -> None:
    try:
        create_notification(
            db,
            user_id=user_id,
            title="Added to team",
            content=f"You were added to the team \"{team.name}\"",
            notification_type=NotificationType.SYSTEM,
            related_type="team",
            related_id=team.id,
        )
    except Exception:
        logger.exception("Failed to notify user %s about team %s", user_id, team.id)
        db.rollback()


def _load_team(db: Session, team_id: int) -> Team:
    return (
        db.query(Team)
        .options(selectinload(Team.members), selectinload(Team.manager))
        .filter(Team.id == team_id)
        .first()
    )


@router.get("", response_model=List[TeamOut])
def list_teams(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Teams the caller belongs to or manages (every team for managers and admins)"""
    query = db.query(Team).options(selectinload(Team.members), selectinload(Team.manager))
    if not is_privileged(current_user.role):
        query = query.filter(
            or_(
                Team.manager_id == current_user.id,
                Team.id.in_(db.query(TeamMember.team_id).filter(TeamMember.user_id == current_user.id)),
            )
        )
    return [TeamOut.model_validate(team) for team in query.order_by(Team.name, Team.id).all()]


@router.post("", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(
    payload: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """Create a team with optional manager and initial members"""
    if payload.manager_id is not None:
        _active_user(db, payload.manager_id, "managerId")

    member_ids = list(dict.fromkeys(payload.member_ids))
    for user_id in member_ids:
        _active_user(db, user_id, "memberIds")

    team = Team(name=payload.name.strip(), description=payload.description, manager_id=payload.manager_id)
    db.add(team)
    db.flush()
    for user_id in member_ids:
        db.add(TeamMember(team_id=team.id, user_id=user_id))
    db.commit()
    logger.info("User %s created team %s with %d members", current_user.id, team.id, len(member_ids))

    for user_id in member_ids:
        if user_id != current_user.id:
            _notify_added(db, team, user_id)
    return TeamOut.model_validate(_load_team(db, team.id))


@router.post("/{team_id}/members", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def add_team_member(
    team_id: int,
    payload: TeamMemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """Add a user to a team"""
    team = db.query(Team).filter(Team.id == team_id).first()
    if team is None:
        raise NotFoundError("Team not found", code="TEAM_NOT_FOUND")
    _active_user(db, payload.user_id, "userId")

    existing = (
        db.query(TeamMember.id)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == payload.user_id)
        .first()
    )
    if existing:
        raise ConflictError("User is already a member of this team", code="ALREADY_MEMBER")

    db.add(TeamMember(team_id=team_id, user_id=payload.user_id))
    db.commit()
    logger.info("User %s added user %s to team %s", current_user.id, payload.user_id, team_id)

    if payload.user_id != current_user.id:
        _notify_added(db, team, payload.user_id)
    return TeamOut.model_validate(_load_team(db, team_id))
