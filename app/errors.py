"""
Matching Error Taxonomy

Every failure the matching services raise carries a stable error code, a
human-readable message and a details dict naming the entity and operation
involved. main.py maps each class to an HTTP status and the app-wide
{"error": {"code", "message", "details"}} body.
"""
from typing import Any, Dict, Optional


class MatchingError(Exception):
    """Base class for all matching service errors"""

    code = "MATCHING_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or None,
            }
        }


class NotFoundError(MatchingError):
    """Referenced student, peer or session does not exist"""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any, operation: str, message: Optional[str] = None):
        super().__init__(
            message or f"{entity.capitalize()} not found",
            {"entity": entity, "id": str(entity_id), "operation": operation},
        )
        self.entity = entity
        self.entity_id = entity_id


class EmptyCandidateSetError(MatchingError):
    """No peers exist at all, so there is nothing to rank"""

    code = "EMPTY_CANDIDATE_SET"
    status_code = 404

    def __init__(self, operation: str = "rank_candidates"):
        super().__init__("No peers available", {"entity": "peer", "operation": operation})


class InsufficientInputError(MatchingError):
    """Bulk matching was asked to run without students or without peers"""

    code = "INSUFFICIENT_INPUT"
    status_code = 400

    def __init__(self, student_count: int, peer_count: int, operation: str = "run_bulk_match"):
        super().__init__(
            "Need students and peers to run bulk match",
            {"students": student_count, "peers": peer_count, "operation": operation},
        )


class InputValidationError(MatchingError):
    """Malformed input that passed request parsing but is not usable"""

    code = "VALIDATION_ERROR"
    status_code = 422


class StorageFailureError(MatchingError):
    """The storage layer failed; the original exception is chained"""

    code = "STORAGE_FAILURE"
    status_code = 503

    def __init__(self, operation: str, entity: Optional[str] = None):
        details = {"operation": operation}
        if entity:
            details["entity"] = entity
        super().__init__(f"Storage failure during {operation}", details)


class MatchDeadlineExceeded(MatchingError):
    """Edge construction ran past the configured deadline"""

    code = "DEADLINE_EXCEEDED"
    status_code = 503

    def __init__(self, edges_built: int, edges_total: int):
        super().__init__(
            "Bulk match deadline exceeded",
            {"edges_built": edges_built, "edges_total": edges_total, "operation": "run_bulk_match"},
        )


class ForbiddenError(MatchingError):
    """Authenticated caller may not modify the target resource"""

    code = "FORBIDDEN"
    status_code = 403
