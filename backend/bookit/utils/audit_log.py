from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "booking.created",
    "booking.cancelled",
    "booking.purged",
]
AuditInitiator = Literal["customer", "system"]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _to_json_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "value"):
        return str(value.value)
    return value


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    booking_id: int,
    confirmation_number: Optional[str],
    experience_id: Optional[int],
    slot_id: Optional[int],
    user_email: Optional[str],
    final_price: Optional[Decimal],
    status_from: Optional[str],
    status_to: Optional[str],
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit structured JSON audit log. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
        "booking_id": booking_id,
        "confirmation_number": confirmation_number,
        "experience_id": experience_id,
        "slot_id": slot_id,
        "user_email": user_email,
        "final_price": _to_json_value(final_price),
        "status_from": _to_json_value(status_from),
        "status_to": _to_json_value(status_to),
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update({k: _to_json_value(v) for k, v in extra.items()})

    # Drop None values to keep the log compact.
    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=True))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
