"""
Ledger Engine - FastAPI Dependencies

Shared dependencies for database sessions and request context.

Authentication happens in front of this service; the gateway forwards the
tenant and acting user as headers:
    X-Tenant-ID: tenant (company) whose books are being written
    X-User-ID:   user recorded on created/posted/voided records (optional)
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, status

from ledger_engine.database import get_async_session, get_db  # noqa: F401


@dataclass(frozen=True)
class RequestContext:
    tenant_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None


def _parse_uuid(value: str, header: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header} must be a UUID",
        )


async def get_request_context(
    x_tenant_id: str = Header(..., alias="X-Tenant-ID"),
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
) -> RequestContext:
    """
    Resolve tenant and user from the forwarded headers.

    Raises:
        HTTPException: If a header is present but not a UUID
    """
    return RequestContext(
        tenant_id=_parse_uuid(x_tenant_id, "X-Tenant-ID"),
        user_id=_parse_uuid(x_user_id, "X-User-ID") if x_user_id else None,
    )
