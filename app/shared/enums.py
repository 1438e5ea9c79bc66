"""Shared enumerations for the CRM workflow engine.

Cross-cutting enums used by the domain, application and infrastructure
layers (workflow triggers, operators, action types, execution status,
audit actions).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type for audit tracking (who performed the action)."""

    USER = "user"
    SYSTEM = "system"
    EXTERNAL = "external"


class WorkflowTrigger(_ValuesMixin, str, Enum):
    """Event kinds that start rule matching."""

    CLIENT_CREATED = "client_created"
    CLIENT_UPDATED = "client_updated"
    BOOKING_CREATED = "booking_created"
    BOOKING_COMPLETED = "booking_completed"
    BOOKING_CANCELLED = "booking_cancelled"
    NOTE_ADDED = "note_added"
    TASK_COMPLETED = "task_completed"
    EMAIL_SENT = "email_sent"
    CALL_LOGGED = "call_logged"
    SEGMENT_ASSIGNED = "segment_assigned"
    TAG_ADDED = "tag_added"
    CUSTOM_FIELD_CHANGED = "custom_field_changed"
    SCHEDULE_BASED = "schedule_based"


class ConditionOperator(_ValuesMixin, str, Enum):
    """Operators a workflow condition can apply to a payload field."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    IN = "in"
    NOT_IN = "not_in"


class WorkflowActionType(_ValuesMixin, str, Enum):
    """Effects a matched rule can perform."""

    SEND_EMAIL = "send_email"
    SEND_SMS = "send_sms"
    CREATE_TASK = "create_task"
    ASSIGN_SEGMENT = "assign_segment"
    ADD_TAG = "add_tag"
    REMOVE_TAG = "remove_tag"
    CREATE_NOTE = "create_note"
    UPDATE_FIELD = "update_field"
    ASSIGN_USER = "assign_user"
    WEBHOOK = "webhook"
    DELAY = "delay"


class WorkflowExecutionStatus(_ValuesMixin, str, Enum):
    """Workflow and action execution lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @classmethod
    def terminal(cls) -> frozenset["WorkflowExecutionStatus"]:
        """Statuses after which an execution record is immutable."""
        return frozenset({cls.COMPLETED, cls.FAILED, cls.SKIPPED})


class WorkflowTemplateCategory(_ValuesMixin, str, Enum):
    """Grouping for reusable workflow templates."""

    WELCOME = "welcome"
    FOLLOW_UP = "follow_up"
    RETENTION = "retention"
    UPSELL = "upsell"
    CUSTOM = "custom"


class TaskPriority(_ValuesMixin, str, Enum):
    """Priority of a CRM task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class CommunicationChannel(_ValuesMixin, str, Enum):
    """Delivery channel of an outbound communication."""

    EMAIL = "email"
    SMS = "sms"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types for rule management tracking."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
