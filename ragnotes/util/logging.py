"""
Structured logging for note store operations.
"""

import logging
from typing import Any, Dict, List


def _preview(text: str, limit: int = 50) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for note, vector, retrieval and generation operations."""

    def __init__(self, name: str = "ragnotes"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status == "failed":
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_note_operation(self, operation: str, note_id, text: str = None, status: str = "success"):
        """Log a note row operation."""
        details = {"note_id": note_id}
        if text is not None:
            details["text"] = _preview(text)

        self.log_operation(f"note.{operation}", status, details)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details)

    def log_ingestion(self, chunk_count: int, indexed: int, status: str = "success", details: Dict[str, Any] = None):
        """Log the outcome of one ingest call."""
        log_details = {"chunks": chunk_count, "indexed": indexed}
        if details:
            log_details.update(details)

        self.log_operation("ingest", status, log_details)

    def log_retrieval(self, question: str, matched_ids: List[int], skipped_ids: List[str] = None):
        """Log a retrieval with the ids that made it into the context."""
        log_details = {"question": _preview(question), "matched_ids": matched_ids}
        if skipped_ids:
            log_details["skipped_ids"] = skipped_ids

        self.log_operation("retrieve", "degraded" if skipped_ids else "success", log_details)

    def log_generation(self, model_used: str, context_notes: int, status: str = "success", details: Dict[str, Any] = None):
        """Log a generation call and which model tier served it."""
        log_details = {"model_used": model_used, "context_notes": context_notes}
        if details:
            log_details.update(details)

        self.log_operation("generate", status, log_details)

    def log_drift_finding(self, finding_type: str, record_id: str, details: Dict[str, Any] = None):
        """Log drift detection findings."""
        log_details = {"finding_type": finding_type, "record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation("drift.finding", "detected", log_details)

    def log_correction(self, action_type: str, record_id: str, mode: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a correction action (proposed or applied)."""
        log_details = {"action": action_type, "record_id": record_id, "mode": mode}
        if details:
            log_details.update(details)

        self.log_operation("correction", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
