"""
Audit logging for decoding decisions.
"""

import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog

from ..config import get_settings
from ..models import AuditEntry

logger = structlog.get_logger()


class AuditLogger:
    """
    Logger for the audit trail of a decoding run.
    Provides both in-memory and file-based logging.
    """

    def __init__(self, run_id: str):
        self.run_id = run_id
        self.entries: List[AuditEntry] = []
        self.settings = get_settings()

    def log(self, entry: AuditEntry) -> None:
        """Add an audit entry."""
        self.entries.append(entry)

        logger.debug(
            entry.message,
            action=entry.action.value,
            sale_ids=entry.sale_ids,
            solver=entry.solver,
            success=entry.success,
        )

    def log_many(self, entries: List[AuditEntry]) -> None:
        """Add multiple audit entries."""
        for entry in entries:
            self.log(entry)

    def get_entries(
        self,
        action_filter: Optional[str] = None,
        success_only: bool = False,
    ) -> List[AuditEntry]:
        """Get filtered audit entries."""
        entries = self.entries

        if action_filter:
            entries = [e for e in entries if e.action.value == action_filter]

        if success_only:
            entries = [e for e in entries if e.success]

        return entries

    def export_to_file(self, output_path: Optional[Path] = None) -> Path:
        """Export audit log to JSON file."""
        if output_path is None:
            output_path = self.settings.reports_dir / f"audit_{self.run_id}.json"

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "run_id": self.run_id,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "total_entries": len(self.entries),
            "entries": [e.to_dict() for e in self.entries],
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.info("Audit log exported", path=str(output_path))
        return output_path

    def summary(self) -> dict:
        """Get summary statistics of audit log."""
        action_counts = Counter(e.action.value for e in self.entries)

        return {
            "total_entries": len(self.entries),
            "success_count": sum(1 for e in self.entries if e.success),
            "error_count": sum(1 for e in self.entries if not e.success),
            "action_counts": dict(action_counts),
        }
