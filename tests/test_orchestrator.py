"""
Integration tests for the decoding pipeline.
"""

import json

import pytest

from ticketrecon.models import AmbiguitySolver, AuditAction, SalesContext
from ticketrecon.reconciliation import DecodingOrchestrator
from ticketrecon.utils.audit_logger import AuditLogger

SALES_CSV = """timestamp,buyer_email,buyer_username,amount,sale_kind,seller_name,seller_id,seller_email,token,sale_id,card_name,card_prefix,card_suffix
2024-03-01T10:02:00Z,c@example.com,c,50.00,Cash,Kiosk A,1,a@example.com,t3,s3,N/A,N/A,N/A
2024-03-01T10:00:00Z,a@example.com,a,95.00,Cash,Kiosk A,1,a@example.com,t1,s1,N/A,N/A,N/A
2024-03-01T10:01:00Z,b@example.com,b,120.00,Card,Kiosk B,2,b@example.com,t2,s2,VISA,4111,1111
2024-03-01T10:03:00Z,d@example.com,d,50.00,Card,Kiosk B,2,b@example.com,t4,s4,VISA,4111,2222
2024-03-01T10:04:00Z,e@example.com,e,77.00,Online,N/A,N/A,N/A,t5,s5,MASTER,5500,3333
2024-03-01T10:05:00Z,f@example.com,f,12.34,Cash,Kiosk A,1,a@example.com,t6,s6,N/A,N/A,N/A
not a date,g@example.com,g,50.00,Cash,Kiosk A,1,a@example.com,t7,s7,N/A,N/A,N/A
"""


def kiosk_context(solver):
    return SalesContext.from_config((11, 10), ["45", "50", "50", "70"], solver=solver)


@pytest.fixture
def orchestrator():
    return DecodingOrchestrator()


class TestDecodingOrchestrator:
    """Test suite for full decoding runs."""

    def test_seller_run(self, orchestrator):
        result = orchestrator.run(SALES_CSV, kiosk_context(AmbiguitySolver.SELLER))

        decodings = {s.sale.sale_id: s.decoding() for s in result.ledger}
        assert decodings == {
            "s1": "1 x promotional batch + 1 x batch 1",
            "s2": "1 x batch 2 + 1 x batch 3",
            "s3": "1 x batch 1",
            "s4": "1 x batch 2",
            "s5": "1 x batch 3",
            "s6": "no solution",
        }

        summary = result.summary
        assert summary.total_sales == 6
        assert summary.settled_sales == 5
        assert summary.initially_ambiguous_sales == 2
        assert summary.ambiguous_sales == 0
        assert summary.unmatched_sales == 1
        assert summary.parse_failures == 1
        assert summary.resolved_by_solver == 2
        assert result.parse_errors[0].startswith("row 8:")

    def test_temporal_run(self, orchestrator):
        result = orchestrator.run(SALES_CSV, kiosk_context(AmbiguitySolver.TEMPORAL))
        assert result.summary.ambiguous_sales == 2
        fields = result.report.to_dict()["fields"]
        assert fields["Still ambiguous sales"] == "2"
        assert fields["Ambiguity solver"] == "look behind"

    def test_audit_trail(self, orchestrator, tmp_path):
        result = orchestrator.run(SALES_CSV, kiosk_context(AmbiguitySolver.SELLER))
        audit = result.audit

        assert audit.run_id == result.run_id
        assert len(audit.get_entries(action_filter=AuditAction.AMBIGUITY_RESOLVED.value)) == 2
        assert audit.summary()["error_count"] == 1

        path = audit.export_to_file(tmp_path / "audit.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["run_id"] == result.run_id
        assert data["total_entries"] == len(audit.entries)

    def test_empty_csv(self, orchestrator, context):
        result = orchestrator.run("", context)
        assert result.summary.total_sales == 0
        assert result.summary.settle_rate == 0.0


class TestAuditLogger:

    def test_default_export_location(self, tmp_path):
        audit = AuditLogger("run-1")
        path = audit.export_to_file()
        assert path == tmp_path / "reports" / "audit_run-1.json"
        assert path.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
