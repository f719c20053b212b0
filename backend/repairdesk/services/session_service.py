# Overview: Opaque bearer sessions carrying the immutable tenant triple.

"""
Session Token Management

Tokens are 32 random bytes (hex) handed to the client once; only their
SHA-256 is stored. A session captures (employee_id, store_id, role) at login
and that triple is the TenantContext for every request made with it.

- 24-hour absolute timeout
- 2-hour idle timeout (idle sessions are revoked on next use)
- Sessions of deactivated employees stop validating
"""

import hashlib
import secrets
from datetime import timedelta

from ..extensions import db
from ..models import Employee, SessionToken
from ..time_utils import utcnow
from .tenant_service import TenantContext


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)
SESSION_RETENTION = timedelta(days=30)


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    employee: Employee,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a session for an employee. Returns (session_record, plaintext_token).

    Adds the record to the current transaction; the caller commits.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        employee_id=employee.id,
        store_id=employee.store_id,
        role=employee.role,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def validate_session(token: str) -> TenantContext | None:
    """
    Resolve a bearer token to its TenantContext, or None if the token is
    unknown, revoked, expired, idle too long, or its employee is inactive.
    """
    now = utcnow()
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    employee = session.employee
    if not employee or not employee.is_active or employee.store_id != session.store_id:
        _revoke(session, "Employee deactivated")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()

    return TenantContext(actor_id=session.employee_id, store_id=session.store_id, role=session.role)


def revoke_session(token: str, reason: str = "Logout") -> bool:
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_employee_sessions(employee_id: int, reason: str) -> int:
    """Revoke every live session of an employee. The caller commits."""
    sessions = db.session.query(SessionToken).filter_by(
        employee_id=employee_id,
        is_revoked=False,
    ).all()
    for session in sessions:
        _revoke(session, reason)
    return len(sessions)


def cleanup_expired_sessions() -> int:
    """Delete expired or revoked sessions older than the retention window."""
    now = utcnow()
    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < now,
            SessionToken.is_revoked.is_(True),
        ),
        SessionToken.created_at < now - SESSION_RETENTION,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
