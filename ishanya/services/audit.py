# ishanya/services/audit.py
from __future__ import annotations

import os
import json
import hmac
import hashlib
from typing import Optional, Any, Dict

from fastapi import Request
from sqlalchemy.orm import Session

from ishanya.models.audit import AuditLog

# HMAC secret for audit rows (set through ENV in production)
AUDIT_HMAC_SECRET = os.getenv("AUDIT_HMAC_SECRET", "audit-dev")


def _norm_json(val: Any) -> Dict[str, Any]:
    """None -> {}, dict -> as is, anything else -> {"_raw": ...}"""
    if val is None:
        return {}
    if isinstance(val, dict):
        return val
    return {"_raw": val}


def _build_hmac_hash(
    *,
    action: str,
    status: Optional[str],
    target_type: Optional[str],
    target_id: Optional[str],
    correlation_id: Optional[str],
    prev_values: Dict[str, Any],
    new_values: Dict[str, Any],
) -> str:
    payload = {
        "action": action or "",
        "status": status or "",
        "target_type": target_type or "",
        "target_id": str(target_id or ""),
        "correlation_id": correlation_id or "",
        "prev_values": prev_values,
        "new_values": new_values,
    }
    raw = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
    return hmac.new(AUDIT_HMAC_SECRET.encode("utf-8"), raw.encode("utf-8"), hashlib.sha256).hexdigest()


def write_audit(
    db: Session,
    *,
    action: str,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    status: str = "SUCCESS",
    prev_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """
    Add one audit row to the session. Does not commit; the caller owns the
    transaction.
    """
    actor_id = None
    actor_name = None
    if request is not None and "session" in request.scope:
        sess = request.session
        actor_id = sess.get("uid")
        actor_name = sess.get("full_name") or sess.get("username") or actor_id

    ip = request.client.host if (request and request.client) else None
    path = request.url.path if request else None
    cid = getattr(request.state, "correlation_id", None) if request else None

    prev_j = json.loads(json.dumps(_norm_json(prev_values), default=str))
    new_j = json.loads(json.dumps(_norm_json(new_values), default=str))

    h = _build_hmac_hash(
        action=action,
        status=status,
        target_type=target_type,
        target_id=target_id,
        correlation_id=cid,
        prev_values=prev_j,
        new_values=new_j,
    )

    row = AuditLog(
        action=action,
        status=status,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        prev_values=prev_j,
        new_values=new_j,
        actor_id=str(actor_id) if actor_id is not None else None,
        actor_name=str(actor_name) if actor_name is not None else None,
        ip_address=ip,
        path=path,
        correlation_id=cid,
        hmac_hash=h,
    )
    db.add(row)
    return row
