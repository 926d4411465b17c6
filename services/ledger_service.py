from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from models.refresh_tokens import RefreshToken
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)


class LedgerService:
    """
    Persistence operations on the refresh-token ledger.

    Callers own the transaction for ``add`` and ``mark_used``; revocations
    commit themselves.
    """

    @staticmethod
    def add(db: Session, *, jwt_id: str, token: str, user_id: str,
            issued_at: datetime, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(
            jwt_id=jwt_id,
            token=token,
            user_id=user_id,
            issued_at=issued_at,
            expires_at=expires_at,
            is_used=False,
            is_revoked=False
        )
        db.add(record)
        return record

    @staticmethod
    def get_by_token(db: Session, token: str) -> Optional[RefreshToken]:
        return db.query(RefreshToken).filter(RefreshToken.token == token).one_or_none()

    @staticmethod
    def mark_used(db: Session, record_id: int) -> bool:
        """
        Flip ``is_used`` with a single conditional UPDATE.

        Returns False when the row was already used or revoked by the time the
        UPDATE ran, i.e. a concurrent redemption won. Nothing is committed:
        the caller commits the flip together with the replacement record, or
        rolls it back.
        """
        updated = db.query(RefreshToken).filter(
            RefreshToken.id == record_id,
            RefreshToken.is_used == False,
            RefreshToken.is_revoked == False
        ).update({RefreshToken.is_used: True}, synchronize_session=False)

        return updated == 1

    @staticmethod
    def revoke(db: Session, token: str) -> bool:
        updated = db.query(RefreshToken).filter(
            RefreshToken.token == token,
            RefreshToken.is_revoked == False
        ).update({RefreshToken.is_revoked: True}, synchronize_session=False)
        db.commit()

        if updated:
            logger.info("Refresh token revoked", extra=sanitize_log_data({"refresh_token": token}))
        return updated == 1

    @staticmethod
    def revoke_all_for_user(db: Session, user_id: str) -> int:
        updated = db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.is_revoked == False
        ).update({RefreshToken.is_revoked: True}, synchronize_session=False)
        db.commit()

        logger.info(
            "Revoked all refresh tokens for user",
            extra={"user_id": user_id, "revoked_count": updated}
        )
        return updated
