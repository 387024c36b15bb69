from __future__ import annotations

from enum import Enum

from portal.errors import ValidationError


class _ParseMixin:
    @classmethod
    def parse(cls, value):
        """Coerce ``value`` to a member, raising ValidationError for unknown strings."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValidationError(f"Invalid {cls.__name__}: {value!r}. Must be one of: {allowed}") from None


class DocumentStatus(_ParseMixin, str, Enum):
    """Lifecycle stage of a document. SUBMITTED is the only initial state."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(_ParseMixin, str, Enum):
    ASSIGNMENT = "assignment"
    NOTES = "notes"
    PROJECT = "project"
    THESIS = "thesis"
    OTHER = "other"


class NotificationType(_ParseMixin, str, Enum):
    APPROVAL = "approval"
    REJECTION = "rejection"
    NEW_DOCUMENT = "new_document"
    COMMENT = "comment"


class Role(_ParseMixin, str, Enum):
    STUDENT = "student"
    PROFESSOR = "professor"
