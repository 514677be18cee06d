"""Audit logging service: records write actions on the rundown and admin data."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def log_action(
    db: AsyncSession,
    *,
    user=None,
    action: str,
    resource_type: str,
    resource_id=None,
    bulletin_id=None,
    row_id=None,
    detail: str | None = None,
    changes: dict | None = None,
    ip_address: str | None = None,
    request_id: str | None = None,
) -> None:
    """Write an audit log entry. Failures are logged, never raised."""
    try:
        entry = AuditLog(
            user_id=user.id if user else None,
            user_email=user.email if user else None,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            bulletin_id=bulletin_id,
            row_id=row_id,
            detail=detail,
            changes=changes,
            ip_address=ip_address,
            request_id=request_id,
        )
        db.add(entry)
        await db.flush()
    except Exception as e:
        logger.warning("Audit log write failed: %s", e)


def request_context(request) -> dict:
    """Client address and correlation id for an audit entry."""
    return {
        "ip_address": request.client.host if request.client else None,
        "request_id": getattr(request.state, "request_id", None),
    }
