# workforce/services/token_service.py
"""
Refresh-token persistence and rotation

A refresh token is only honoured while its row exists, is not revoked and has
not expired. rotate() revokes the presented token before issuing its
successor, so each token can be used once. Presenting an already revoked
token is treated as replay and revokes every token the user holds.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from workforce.database import utcnow
from workforce.exceptions import AuthError
from workforce.models import RefreshToken, User, UserStatus
from workforce.utils.security import create_refresh_token, decode_refresh_token

logger = logging.getLogger(__name__)


class RefreshTokenService:

    def issue(self, db: Session, user: User, commit: bool = True) -> RefreshToken:
        token, expires_at = create_refresh_token(user)
        record = RefreshToken(token=token, user_id=user.id, expires_at=expires_at)
        db.add(record)
        if commit:
            db.commit()
            db.refresh(record)
        return record

    def rotate(self, db: Session, token: str) -> Tuple[User, RefreshToken]:
        """Exchange a refresh token for a new one; the old token becomes inert"""
        payload = decode_refresh_token(token)

        record = db.query(RefreshToken).filter(RefreshToken.token == token).first()
        if record is None or record.user_id != payload["userId"]:
            raise AuthError("Invalid refresh token", code="INVALID_REFRESH_TOKEN")

        if record.revoked:
            self._reject_replay(db, record.user_id)

        if record.expires_at <= utcnow():
            raise AuthError("Refresh token expired", code="TOKEN_EXPIRED")

        user = db.query(User).filter(User.id == record.user_id).first()
        if user is None or user.status != UserStatus.ACTIVE:
            raise AuthError("User not found or inactive", code="ACCOUNT_INACTIVE")

        # Claim the row atomically; a concurrent rotation of the same token matches nothing
        claimed = (
            db.query(RefreshToken)
            .filter(RefreshToken.id == record.id, RefreshToken.revoked.is_(False))
            .update({RefreshToken.revoked: True, RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
        )
        if not claimed:
            self._reject_replay(db, record.user_id)

        successor = self.issue(db, user, commit=False)
        db.commit()
        db.refresh(successor)
        return user, successor

    def _reject_replay(self, db: Session, user_id: int) -> None:
        revoked = self.revoke_all(db, user_id)
        logger.warning("Revoked refresh token reused for user %s; revoked %d active tokens", user_id, revoked)
        raise AuthError("Refresh token has been revoked", code="TOKEN_REVOKED")

    def revoke(self, db: Session, token: str, user_id: Optional[int] = None) -> bool:
        """Revoke one token; returns False when there was nothing active to revoke"""
        query = db.query(RefreshToken).filter(RefreshToken.token == token, RefreshToken.revoked.is_(False))
        if user_id is not None:
            query = query.filter(RefreshToken.user_id == user_id)
        record = query.first()
        if record is None:
            return False
        record.revoke()
        db.commit()
        return True

    def revoke_all(self, db: Session, user_id: int) -> int:
        count = (
            db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .update({RefreshToken.revoked: True, RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
        )
        db.commit()
        return count

    def purge_expired(self, db: Session, before: Optional[datetime] = None) -> int:
        """Delete tokens that can never be used again"""
        before = before or utcnow()
        count = (
            db.query(RefreshToken)
            .filter(or_(RefreshToken.expires_at <= before, RefreshToken.revoked.is_(True)))
            .delete(synchronize_session=False)
        )
        db.commit()
        return count


token_service = RefreshTokenService()
