# plan_admin/core/exceptions.py


class PlanEditError(ValueError):
    """An in-memory edit of the plan tree was refused."""


class LastWeekError(PlanEditError):
    def __init__(self) -> None:
        super().__init__("Cannot delete the last week")


class NodeNotFound(PlanEditError):
    def __init__(self, kind: str, node_id: str) -> None:
        super().__init__(f"{kind} {node_id} not found in plan")
        self.kind = kind
        self.node_id = node_id


class PlanValidationError(ValueError):
    """An imported plan document does not match the plan tree schema.

    Only the first problem is reported; the message is already qualified with
    the week/day/workout path it refers to.
    """


class DuplicateWorkoutName(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f'A workout named "{name}" already exists.')
        self.name = name


class PlanSaveError(RuntimeError):
    """A save pass was aborted by a store failure. Earlier writes are not rolled back."""


class AccessDenied(PermissionError):
    """Sign-in or session check rejected for the current account."""


class SelfModificationError(PermissionError):
    def __init__(self, action: str) -> None:
        super().__init__(f"You cannot {action} your own account")
        self.action = action
