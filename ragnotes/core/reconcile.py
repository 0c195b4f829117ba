"""
Drift detection and correction between the notes table and the vector index.

Maintenance sweep, run on demand (script or admin endpoint), never on the
request path. The notes table is canonical:
- missing_vector: a note with no vector entry -> re-embed and upsert (ADD_VECTOR)
- orphaned_vector: a vector entry with no note -> remove it (REMOVE_VECTOR)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import VALID_CORRECTION_MODES, get_correction_mode
from .dao import NoteRepository
from .errors import NoteStoreError
from ..util.logging import logger
from ..vector.embeddings import EmbeddingService
from ..vector.index import IVectorStore
from ..vector.types import VectorRecord


@dataclass
class DriftFinding:
    """Represents a detected inconsistency between the notes table and the vector index."""
    id: str
    type: str  # 'missing_vector', 'orphaned_vector'
    record_id: str
    details: Dict[str, Any]


@dataclass
class CorrectionAction:
    """Represents a corrective action to resolve drift."""
    type: str  # 'ADD_VECTOR', 'REMOVE_VECTOR'
    record_id: str
    metadata: Dict[str, Any]


@dataclass
class CorrectionPlan:
    """A complete plan to resolve a drift finding."""
    id: str
    finding_id: str
    actions: List[CorrectionAction]


@dataclass
class CorrectionResult:
    """Result of executing a correction action."""
    plan_id: str
    action_type: str
    record_id: str
    success: bool
    action_taken: bool
    error_message: str = ""


@dataclass
class ReconciliationReport:
    mode: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    findings: List[DriftFinding] = field(default_factory=list)
    results: List[CorrectionResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for serialization."""
        data = {
            "mode": self.mode,
            "started_at": self.started_at.isoformat(),
            "findings": [
                {"id": f.id, "type": f.type, "record_id": f.record_id, "details": f.details}
                for f in self.findings
            ],
            "results": [
                {
                    "plan_id": r.plan_id,
                    "action": r.action_type,
                    "record_id": r.record_id,
                    "success": r.success,
                    "action_taken": r.action_taken,
                    "error_message": r.error_message,
                }
                for r in self.results
            ],
        }
        if self.completed_at:
            data["completed_at"] = self.completed_at.isoformat()
        return data


def detect_drift(repository: NoteRepository, vector_store: IVectorStore) -> List[DriftFinding]:
    """
    Compare note ids against vector entry ids.

    Returns:
        List of findings, notes without vectors first, then vectors without notes.
    """
    # Vector ids first so a pair written between the two reads is never reported orphaned
    vector_ids = vector_store.list_ids()
    notes = {str(note.id): note for note in repository.list_notes()}

    findings = []

    for record_id, note in notes.items():
        if record_id not in vector_ids:
            findings.append(DriftFinding(
                id=str(uuid.uuid4()),
                type="missing_vector",
                record_id=record_id,
                details={
                    "created_at": note.created_at.isoformat() if note.created_at else None,
                    "reason": "Note exists but has no vector entry"
                }
            ))

    for record_id in sorted(vector_ids - set(notes)):
        findings.append(DriftFinding(
            id=str(uuid.uuid4()),
            type="orphaned_vector",
            record_id=record_id,
            details={"reason": "Vector entry exists but its note is missing"}
        ))

    for finding in findings:
        logger.log_drift_finding(finding.type, finding.record_id)

    return findings


def create_correction_plan(finding: DriftFinding) -> CorrectionPlan:
    """Generate a correction plan for a drift finding."""
    if finding.type == "missing_vector":
        action = CorrectionAction(
            type="ADD_VECTOR",
            record_id=finding.record_id,
            metadata={"reason": "Embed note that has no vector entry"}
        )
    elif finding.type == "orphaned_vector":
        action = CorrectionAction(
            type="REMOVE_VECTOR",
            record_id=finding.record_id,
            metadata={"reason": "Remove vector entry whose note is gone"}
        )
    else:
        raise ValueError(f"Unknown drift type: {finding.type}")

    return CorrectionPlan(id=str(uuid.uuid4()), finding_id=finding.id, actions=[action])


def apply_corrections(
    plans: List[CorrectionPlan],
    repository: NoteRepository,
    vector_store: IVectorStore,
    embedding_service: EmbeddingService,
    mode: str = None,
) -> List[CorrectionResult]:
    """
    Apply correction plans according to mode.

    Modes:
    - 'off': nothing is done or logged
    - 'propose': actions are logged, no store is changed
    - 'apply': actions are executed; a failing action is recorded and the rest continue
    """
    mode = mode or get_correction_mode()
    if mode not in VALID_CORRECTION_MODES:
        raise ValueError(f"Invalid correction mode: {mode}")

    results = []
    if mode == "off":
        return results

    for plan in plans:
        for action in plan.actions:
            if mode == "propose":
                logger.log_correction(action.type, action.record_id, mode, status="proposed")
                results.append(CorrectionResult(
                    plan_id=plan.id, action_type=action.type, record_id=action.record_id,
                    success=True, action_taken=False
                ))
                continue

            results.append(_execute_action(plan, action, repository, vector_store, embedding_service))

    return results


def _note_exists(repository: NoteRepository, record_id: str) -> bool:
    return record_id.isdigit() and repository.get_note(int(record_id)) is not None


def _execute_action(plan, action, repository, vector_store, embedding_service) -> CorrectionResult:
    result = CorrectionResult(
        plan_id=plan.id, action_type=action.type, record_id=action.record_id,
        success=False, action_taken=False
    )

    try:
        if action.type == "ADD_VECTOR":
            note = repository.get_note(int(action.record_id))
            if note is None:
                # Deleted since detection; nothing left to index
                result.success = True
                return result
            vector = embedding_service.embed(note.text)
            vector_store.upsert([VectorRecord(id=action.record_id, vector=vector, metadata={"reconciled": True})])
        elif action.type == "REMOVE_VECTOR":
            if _note_exists(repository, action.record_id):
                # Note written since detection; the entry is no longer orphaned
                result.success = True
                logger.log_correction(action.type, action.record_id, "apply", status="skipped")
                return result
            vector_store.delete([action.record_id])
        else:
            raise ValueError(f"Unknown correction action: {action.type}")
    except Exception as e:
        result.error_message = str(e)
        logger.log_correction(action.type, action.record_id, "apply", status="failed", details={"error": str(e)})
        return result

    result.success = True
    result.action_taken = True
    logger.log_correction(action.type, action.record_id, "apply")
    return result


def reconcile(
    repository: NoteRepository,
    vector_store: IVectorStore,
    embedding_service: EmbeddingService,
    mode: str = None,
) -> ReconciliationReport:
    """Detect drift, plan one action per finding and apply according to mode."""
    mode = mode or get_correction_mode()
    report = ReconciliationReport(mode=mode, started_at=datetime.now())

    report.findings = detect_drift(repository, vector_store)
    plans = [create_correction_plan(f) for f in report.findings]
    report.results = apply_corrections(plans, repository, vector_store, embedding_service, mode)

    report.completed_at = datetime.now()
    applied = sum(1 for r in report.results if r.action_taken)
    logger.info(f"Reconciliation ({mode}): {len(report.findings)} findings, {applied} corrections applied")
    return report


def rebuild_vectors(
    repository: NoteRepository,
    vector_store: IVectorStore,
    embedding_service: EmbeddingService,
    batch_size: int = 32,
) -> int:
    """
    Re-embed every note and upsert its vector entry.

    A batch that fails to embed is logged and skipped; those notes surface as
    missing_vector on the next reconcile.

    Returns:
        Number of vector entries written
    """
    notes = repository.list_notes()
    embedded_count = 0

    for start in range(0, len(notes), batch_size):
        batch = notes[start:start + batch_size]
        try:
            vectors = embedding_service.embed([note.text for note in batch])
        except NoteStoreError as e:
            logger.log_operation("rebuild", "failed", {
                "note_ids": [note.id for note in batch],
                "error": e.message,
            })
            continue

        vector_store.upsert([
            VectorRecord(id=str(note.id), vector=vector, metadata={"rebuilt": True})
            for note, vector in zip(batch, vectors)
        ])
        embedded_count += len(batch)

    logger.log_operation("rebuild", "success", {"notes": len(notes), "indexed": embedded_count})
    return embedded_count
