"""
Domain error taxonomy shared by every app.

Services raise these; the DRF exception handler at the bottom of this module
turns them into responses. Each kind has its own ``code`` so clients can tell
"nothing there" from "already exists" from "not allowed to remove".
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "domain_error"

    def __init__(self, message=None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self):
        return {"detail": self.message, "code": self.code}


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str, identifier=None, message=None):
        self.entity = entity
        self.identifier = identifier
        if message is None:
            message = f"{entity} not found" if identifier is None else f"{entity} not found with id {identifier}"
        super().__init__(message)

    def to_dict(self):
        data = super().to_dict()
        data["entity"] = self.entity
        return data


class DuplicateName(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_name"

    def __init__(self, entity: str, name: str):
        self.entity = entity
        self.name = name
        super().__init__(f"{entity} name already exists: {name}")


class DuplicateAssociation(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_association"

    def __init__(self, entity: str, key, message=None):
        self.entity = entity
        self.key = tuple(key)
        super().__init__(message or f"{entity} already exists for {self.key}")


class DuplicateSequenceNumber(DuplicateAssociation):
    code = "duplicate_sequence_number"

    def __init__(self, workflow_id, sequence_number):
        super().__init__(
            "Workflow step",
            (workflow_id, sequence_number),
            f"Workflow {workflow_id} already has a step at position {sequence_number}",
        )


class DuplicateDependency(DuplicateAssociation):
    code = "duplicate_dependency"

    def __init__(self, task_id, depends_on_task_id):
        super().__init__(
            "Task dependency",
            (task_id, depends_on_task_id),
            f"Task {task_id} already depends on task {depends_on_task_id}",
        )


class ReferentialIntegrity(DomainError):
    status_code = status.HTTP_423_LOCKED
    code = "referential_integrity"

    def __init__(self, entity: str, identifier, message=None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(message or f"{entity} {identifier} is still referenced and cannot be removed")


class ValidationFailure(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_failure"


class SelfDependencyError(ValidationFailure):
    code = "self_dependency"


class DependencyCycleError(ValidationFailure):
    code = "dependency_cycle"


class WorkflowConformanceError(ValidationFailure):
    code = "workflow_conformance"


def require_name(value, field: str = "name") -> str:
    if value is None or not str(value).strip():
        raise ValidationFailure(f"{field} must not be blank")
    return str(value).strip()


def domain_exception_handler(exc, context):
    """REST_FRAMEWORK["EXCEPTION_HANDLER"]: render DomainError, defer the rest to DRF."""
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.warning(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        set_rollback()
        return Response(exc.to_dict(), status=exc.status_code)
    return exception_handler(exc, context)
