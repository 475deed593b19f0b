"""Audit trail models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .enums import AuditAction


@dataclass
class AuditEntry:
    """An entry in the audit log."""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Action
    action: AuditAction = AuditAction.SALES_INGESTED

    # Context
    sale_ids: List[str] = field(default_factory=list)
    solver: Optional[str] = None
    pass_number: Optional[int] = None

    # Details
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    # Outcome
    success: bool = True
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "sale_ids": self.sale_ids,
            "solver": self.solver,
            "pass_number": self.pass_number,
            "message": self.message,
            "details": self.details,
            "success": self.success,
            "error_message": self.error_message,
        }
