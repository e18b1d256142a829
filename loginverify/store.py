from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db_models import Verification

PENDING = "pending"
DECISIONS = {"approve": "approved", "deny": "denied"}

@dataclass
class DecisionState:
    id: str
    status: str  # pending|approved|denied
    decided_at: Optional[datetime]

def _dialect_insert(db: Session):
    name = db.get_bind().dialect.name
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if name in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert
        return insert
    return None

def _upsert(insert, verification_id: str, values: dict):
    stmt = insert(Verification).values(id=verification_id, **values)
    if hasattr(stmt, "on_conflict_do_update"):
        return stmt.on_conflict_do_update(index_elements=["id"], set_=values)
    return stmt.on_duplicate_key_update(**values)

def _get_and_set(db: Session, verification_id: str, values: dict) -> None:
    row = db.get(Verification, verification_id)
    if row is None:
        db.add(Verification(id=verification_id, **values))
    else:
        for k, v in values.items():
            setattr(row, k, v)
    try:
        db.commit()
    except IntegrityError:
        # lost a race on the first insert: the row exists now, overwrite it
        db.rollback()
        stmt = update(Verification).where(Verification.id == verification_id).values(**values)
        db.execute(stmt.execution_options(synchronize_session=False))
        db.commit()

def record_decision(db: Session, verification_id: str, status: str) -> None:
    """
    Merge-upsert of status + server-side decided_at.
    Other columns of an existing row are left as they are; last write wins.
    """
    values = {"status": status, "decided_at": func.now()}
    insert = _dialect_insert(db)
    if insert is None:
        _get_and_set(db, verification_id, values)
        return
    db.execute(_upsert(insert, verification_id, values))
    db.commit()

def decision_state(db: Session, verification_id: str) -> DecisionState:
    row = db.get(Verification, verification_id)
    if row is None:
        return DecisionState(verification_id, PENDING, None)
    return DecisionState(row.id, row.status or PENDING, row.decided_at)
