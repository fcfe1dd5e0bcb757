"""Application service: Audit Ledger use case (query)."""

from __future__ import annotations

from stockledger.application.dto import IntegrityIssueDTO
from stockledger.domain.service.ledger_auditor import LedgerAuditor


class AuditLedgerHandler:

    def __init__(self, auditor: LedgerAuditor) -> None:
        self._auditor = auditor

    def handle(
        self, product_id: int | None = None, warehouse_id: int | None = None
    ) -> list[IntegrityIssueDTO]:
        if product_id is not None and warehouse_id is not None:
            issues = self._auditor.reconcile(product_id, warehouse_id)
        else:
            issues = self._auditor.reconcile_all()
        return [
            IntegrityIssueDTO(
                kind=issue.kind.value,
                product_id=issue.product_id,
                warehouse_id=issue.warehouse_id,
                detail=issue.detail,
            )
            for issue in issues
        ]
