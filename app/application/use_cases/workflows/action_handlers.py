"""Workflow action handlers: one coroutine per action type.

Handlers validate their params (typed models), resolve the target client
and recipients with payload fallbacks, substitute {{variables}} into text,
and delegate to a collaborator port. Each returns a JSON-compatible dict
that is stored on the action's execution record.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic_core import to_jsonable_python

from app.application.dtos.workflow_action import (
    AssignSegmentParams,
    AssignUserParams,
    ClientScopedParams,
    CreateNoteParams,
    CreateTaskParams,
    DelayParams,
    SendEmailParams,
    SendSmsParams,
    TagParams,
    UpdateFieldParams,
    WebhookParams,
    parse_action_params,
)
from app.application.interfaces.repositories import ICrmMutationRepository, ITaskRepository
from app.application.interfaces.services import ICommunicationService, IWebhookClient
from app.application.services.variable_substitution import (
    replace_variables,
    replace_variables_in,
)
from app.core.constants import SYSTEM_ACTOR, WEBHOOK_DEFAULT_CONTENT_TYPE
from app.domain.entities.workflow import WorkflowActionConfig
from app.domain.exceptions import ActionParameterException
from app.shared.context import get_current_actor_id
from app.shared.enums import WorkflowActionType

Payload = Mapping[str, Any]
ActionResult = dict[str, Any]
_Handler = Callable[[Any, Payload, WorkflowActionConfig], Awaitable[ActionResult]]


def _payload_str(payload: Payload, key: str) -> str | None:
    value = payload.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _require_client_id(
    kind: WorkflowActionType, params: ClientScopedParams, payload: Payload
) -> str:
    client_id = params.client_id or _payload_str(payload, "client_id")
    if not client_id:
        raise ActionParameterException(
            kind.value, f"{kind.value} requires client_id (in params or trigger payload)"
        )
    return client_id


def _created_by() -> str:
    return get_current_actor_id() or SYSTEM_ACTOR


class WorkflowActionHandlers:
    """Static dispatch table from WorkflowActionType to handler coroutine."""

    def __init__(
        self,
        *,
        communication_service: ICommunicationService,
        task_repo: ITaskRepository,
        crm_repo: ICrmMutationRepository,
        webhook_client: IWebhookClient,
    ) -> None:
        self.communication_service = communication_service
        self.task_repo = task_repo
        self.crm_repo = crm_repo
        self.webhook_client = webhook_client
        self._dispatch: dict[WorkflowActionType, _Handler] = {
            WorkflowActionType.SEND_EMAIL: self._send_email,
            WorkflowActionType.SEND_SMS: self._send_sms,
            WorkflowActionType.CREATE_TASK: self._create_task,
            WorkflowActionType.ASSIGN_SEGMENT: self._assign_segment,
            WorkflowActionType.ADD_TAG: self._add_tag,
            WorkflowActionType.REMOVE_TAG: self._remove_tag,
            WorkflowActionType.CREATE_NOTE: self._create_note,
            WorkflowActionType.UPDATE_FIELD: self._update_field,
            WorkflowActionType.ASSIGN_USER: self._assign_user,
            WorkflowActionType.WEBHOOK: self._webhook,
            WorkflowActionType.DELAY: self._delay,
        }
        missing = set(WorkflowActionType) - set(self._dispatch)
        if missing:
            raise RuntimeError(
                f"No handler registered for action types: {sorted(m.value for m in missing)}"
            )

    async def execute(self, action: WorkflowActionConfig, payload: Payload) -> ActionResult:
        """Run one action against the trigger payload.

        Raises:
            UnknownActionTypeException: action.type is not a known action.
            ActionParameterException: params missing or invalid.
            WorkflowActionException: collaborator-level failure.
        """
        params = parse_action_params(action.type, action.params)
        kind = WorkflowActionType(action.type)
        return await self._dispatch[kind](params, payload or {}, action)

    async def _send_email(
        self, params: SendEmailParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        kind = WorkflowActionType.SEND_EMAIL
        client_id = _require_client_id(kind, params, payload)
        to = params.to or _payload_str(payload, "email")
        if not to:
            raise ActionParameterException(
                kind.value, "send_email requires a recipient (params.to or payload email)"
            )
        sent = await self.communication_service.send_email(
            client_id,
            to,
            replace_variables(params.subject, payload),
            replace_variables(params.body, payload),
            params.template_id,
        )
        return {
            "communication_id": sent.id,
            "channel": sent.channel,
            "to": sent.recipient,
            "status": sent.status,
        }

    async def _send_sms(
        self, params: SendSmsParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        kind = WorkflowActionType.SEND_SMS
        client_id = _require_client_id(kind, params, payload)
        to = params.to or _payload_str(payload, "phone_number")
        if not to:
            raise ActionParameterException(
                kind.value, "send_sms requires a recipient (params.to or payload phone_number)"
            )
        sent = await self.communication_service.send_sms(
            client_id, to, replace_variables(params.message, payload)
        )
        return {
            "communication_id": sent.id,
            "channel": sent.channel,
            "to": sent.recipient,
            "status": sent.status,
        }

    async def _create_task(
        self, params: CreateTaskParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.CREATE_TASK, params, payload)
        description = (
            replace_variables(params.description, payload) if params.description else None
        )
        task = await self.task_repo.create_task(
            replace_variables(params.title, payload),
            client_id=client_id,
            description=description,
            task_type="follow_up",
            priority=params.priority.value,
            status="todo",
            due_date=params.due_date,
            created_by=_created_by(),
        )
        return to_jsonable_python(
            {
                "task_id": task.id,
                "client_id": task.client_id,
                "title": task.title,
                "priority": task.priority,
                "due_date": task.due_date,
            }
        )

    async def _assign_segment(
        self, params: AssignSegmentParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.ASSIGN_SEGMENT, params, payload)
        client = await self.crm_repo.assign_segment(client_id, params.segment_id)
        return {
            "client_id": client.id,
            "segment_id": params.segment_id,
            "segment_ids": list(client.segment_ids),
        }

    async def _add_tag(
        self, params: TagParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.ADD_TAG, params, payload)
        client = await self.crm_repo.add_tag(client_id, params.tag_id)
        return {"client_id": client.id, "tag_id": params.tag_id, "tags": list(client.tags)}

    async def _remove_tag(
        self, params: TagParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.REMOVE_TAG, params, payload)
        client = await self.crm_repo.remove_tag(client_id, params.tag_id)
        return {"client_id": client.id, "tag_id": params.tag_id, "tags": list(client.tags)}

    async def _create_note(
        self, params: CreateNoteParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.CREATE_NOTE, params, payload)
        note = await self.crm_repo.create_note(
            client_id,
            replace_variables(params.content, payload),
            note_type=params.type,
            priority=params.priority,
            created_by=_created_by(),
        )
        return {"note_id": note.id, "client_id": note.client_id, "content": note.content}

    async def _update_field(
        self, params: UpdateFieldParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.UPDATE_FIELD, params, payload)
        value = params.value
        if isinstance(value, str):
            value = replace_variables(value, payload)
        client = await self.crm_repo.update_field(client_id, params.field, value)
        return to_jsonable_python(
            {"client_id": client.id, "field": params.field, "value": value}
        )

    async def _assign_user(
        self, params: AssignUserParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        client_id = _require_client_id(WorkflowActionType.ASSIGN_USER, params, payload)
        client = await self.crm_repo.assign_user(client_id, params.user_id)
        return {"client_id": client.id, "user_id": client.assigned_user_id}

    async def _webhook(
        self, params: WebhookParams, payload: Payload, _action: WorkflowActionConfig
    ) -> ActionResult:
        headers = {"Content-Type": WEBHOOK_DEFAULT_CONTENT_TYPE, **params.headers}
        body = replace_variables_in(params.body, payload) if params.body is not None else None
        response = await self.webhook_client.send(params.url, params.method, headers, body)
        return to_jsonable_python(response)

    async def _delay(
        self, params: DelayParams, _payload: Payload, action: WorkflowActionConfig
    ) -> ActionResult:
        seconds = action.delay if action.delay is not None else (params.seconds or 0.0)
        return {"delayed_seconds": seconds}
