"""
Domain errors raised by the goal tree store.

Every error carries a human readable message plus a ``details`` dict and
serializes to the API error envelope through ``to_dict``.
"""


class GoalTreeError(Exception):
    """Base class for all store errors."""

    status_code = 400

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        return {
            "error": {
                "code": self.__class__.__name__,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(GoalTreeError):
    """A required field is missing or invalid."""

    status_code = 400


class NotFound(GoalTreeError):
    """The target record does not exist."""

    status_code = 404

    def __init__(self, kind: str, record_id: int):
        super().__init__(
            message=f"{kind.capitalize()} with id {record_id} not found",
            details={"kind": kind, "id": record_id},
        )


class InvalidParent(GoalTreeError):
    """The requested parent cannot hold the record."""

    status_code = 400


class ParentNotFound(InvalidParent):
    status_code = 404

    def __init__(self, parent_id: int):
        super().__init__(
            message=f"Parent goal with id {parent_id} not found",
            details={"parent_id": parent_id},
        )


class CyclicMoveError(GoalTreeError):
    """Moving the container under the target would close a loop."""

    status_code = 409

    def __init__(self, goal_id: int, target_id: int):
        super().__init__(
            message="Cannot move a node to be a child of itself or its own descendant",
            details={"id": goal_id, "new_parent_id": target_id},
        )


class CorruptTreeError(GoalTreeError):
    """The stored records do not form a forest."""

    status_code = 500
