from __future__ import annotations

# callable error kind -> (canonical status, http status)
ERROR_KINDS = {
    "ok": ("OK", 200),
    "cancelled": ("CANCELLED", 499),
    "unknown": ("UNKNOWN", 500),
    "invalid-argument": ("INVALID_ARGUMENT", 400),
    "deadline-exceeded": ("DEADLINE_EXCEEDED", 504),
    "not-found": ("NOT_FOUND", 404),
    "already-exists": ("ALREADY_EXISTS", 409),
    "permission-denied": ("PERMISSION_DENIED", 403),
    "resource-exhausted": ("RESOURCE_EXHAUSTED", 429),
    "failed-precondition": ("FAILED_PRECONDITION", 400),
    "aborted": ("ABORTED", 409),
    "out-of-range": ("OUT_OF_RANGE", 400),
    "unimplemented": ("UNIMPLEMENTED", 501),
    "internal": ("INTERNAL", 500),
    "unavailable": ("UNAVAILABLE", 503),
    "data-loss": ("DATA_LOSS", 500),
    "unauthenticated": ("UNAUTHENTICATED", 401),
}

class CallableError(Exception):
    """Error surfaced to a callable client as {"error": {"status", "message"}}."""

    def __init__(self, kind: str, message: str):
        if kind not in ERROR_KINDS:
            kind = "internal"
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status(self) -> str:
        return ERROR_KINDS[self.kind][0]

    @property
    def http_status(self) -> int:
        return ERROR_KINDS[self.kind][1]

    def to_body(self) -> dict:
        return {"error": {"status": self.status, "message": self.message}}
