"""
Error taxonomy for canvas compilation.

Every failure is fatal to the transform that raised it; nothing here is
retried or recovered from inside the core.
"""


class CanvasError(Exception):
    """Base class for all canvas compilation errors."""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"status": "error", "error": str(self)}


class CanvasIntegrityError(CanvasError, ValueError):
    """A structural violation: missing or duplicate ids, or a dangling edge reference."""

    def __init__(self, message: str, node_id: str | None = None, edge_id: str | None = None):
        super().__init__(message)
        self.node_id = node_id
        self.edge_id = edge_id

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


class CanvasFormatError(CanvasError, ValueError):
    """Malformed source text or a record of the wrong shape."""
