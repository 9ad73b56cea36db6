import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..core.database import Base, create_session_factory
from ..core.errors import DuplicateAccount, StoreUnavailable
from ..core.security import utcnow
from ..models.staff import Staff
from ..schemas.staff import StaffAccount
from .base import CredentialStore, normalize_email

logger = logging.getLogger(__name__)


class SqlCredentialStore(CredentialStore):
    """Account store backed by the ``staff`` table."""

    backend = "sql"

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = create_session_factory(engine)
        self._schema_ready = False

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        try:
            Base.metadata.create_all(bind=self.engine, tables=[Staff.__table__])
        except SQLAlchemyError as exc:
            logger.error(f"Error ensuring staff table exists: {exc}")
            raise StoreUnavailable("Could not prepare the staff table") from exc
        self._schema_ready = True

    def find_by_email(self, email: str) -> Optional[StaffAccount]:
        wanted = normalize_email(email)
        with self.SessionLocal() as db:
            try:
                row = db.query(Staff).filter(func.lower(Staff.email) == wanted).first()
            except SQLAlchemyError as exc:
                raise StoreUnavailable("Staff lookup by email failed") from exc
            return StaffAccount.model_validate(row) if row else None

    def find_by_id(self, account_id: str) -> Optional[StaffAccount]:
        with self.SessionLocal() as db:
            try:
                row = db.query(Staff).filter(Staff.id == account_id).first()
            except SQLAlchemyError as exc:
                raise StoreUnavailable("Staff lookup by id failed") from exc
            return StaffAccount.model_validate(row) if row else None

    def insert(self, account: StaffAccount) -> None:
        row = Staff(
            id=account.id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=normalize_email(account.email),
            password_hash=account.password_hash,
            role=account.role,
            organization=account.organization,
            phone=account.phone,
            is_active=account.is_active,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )
        with self.SessionLocal() as db:
            try:
                db.add(row)
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                logger.info(f"Staff insert rejected by unique constraint: {row.email}")
                raise DuplicateAccount() from exc
            except SQLAlchemyError as exc:
                db.rollback()
                raise StoreUnavailable("Staff insert failed") from exc

    def set_active(self, account_id: str, is_active: bool) -> bool:
        with self.SessionLocal() as db:
            try:
                updated = (
                    db.query(Staff)
                    .filter(Staff.id == account_id)
                    .update({"is_active": is_active, "updated_at": utcnow()})
                )
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise StoreUnavailable("Staff status update failed") from exc
            return updated > 0
