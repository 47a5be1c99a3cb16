"""Tool registry exposing descriptors and dispatch for model tool calls.

Tools are wrapped into ``ToolHandler`` instances at registration time and keyed
by name (last write wins). Descriptors advertised to the model are generated
from each tool's schema on every call. ``execute`` dispatches a single
``CallRequest``; ``execute_batch`` runs several concurrently, keeps input
order, and fails as a whole on the first error.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from typed_tools.config import DEFAULT_PAYLOAD_CHARS, BatchPolicy, Settings
from typed_tools.errors import DispatchError, EncodeError, ToolNotFoundError
from typed_tools.tools.base import Tool
from typed_tools.tools.handler import ToolHandler
from typed_tools.types import CallRequest, CallResponse, ToolDescriptor


class ToolRegistry:
    """Name-keyed collection of tool handlers."""

    def __init__(
        self,
        *,
        batch_policy: BatchPolicy = BatchPolicy.CANCEL,
        logger: logging.Logger | None = None,
        payload_chars: int = DEFAULT_PAYLOAD_CHARS,
    ) -> None:
        self.batch_policy = batch_policy
        self.logger = logger
        self.payload_chars = payload_chars
        self._handlers: dict[str, ToolHandler] = {}
        self._abandoned: set[asyncio.Future[CallResponse]] = set()

    @classmethod
    def from_settings(cls, settings: Settings, logger: logging.Logger | None = None) -> ToolRegistry:
        return cls(batch_policy=settings.batch_policy, logger=logger, payload_chars=settings.log_payload_chars)

    # registration

    def register(self, tool: Tool[Any, Any]) -> ToolRegistry:
        handler = ToolHandler(tool)
        self._handlers[handler.name] = handler
        return self

    def register_all(self, tools: Iterable[Tool[Any, Any]]) -> ToolRegistry:
        for tool in tools:
            self.register(tool)
        return self

    def remove(self, name: str) -> bool:
        return self._handlers.pop(name, None) is not None

    def clear(self) -> None:
        self._handlers.clear()

    def merge(self, other: ToolRegistry) -> ToolRegistry:
        """Move every entry of ``other`` into this registry; ``other`` ends up empty."""

        if other is self:
            return self
        self._handlers.update(other._handlers)
        other._handlers.clear()
        return self

    # lookup

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    def handlers(self) -> list[ToolHandler]:
        return list(self._handlers.values())

    def has(self, name: str) -> bool:
        return name in self._handlers

    def names(self) -> set[str]:
        return set(self._handlers)

    def count(self) -> int:
        return len(self._handlers)

    def is_empty(self) -> bool:
        return not self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))

    def __repr__(self) -> str:
        return f"ToolRegistry(tool_count={len(self._handlers)}, tool_names={sorted(self._handlers)})"

    # export

    def descriptors(self) -> list[ToolDescriptor]:
        """Return one descriptor per registered tool; order is not guaranteed."""

        return [handler.descriptor() for handler in list(self._handlers.values())]

    def openai_tools(self) -> list[dict[str, Any]]:
        return [descriptor.to_openai_tool() for descriptor in self.descriptors()]

    # execution

    async def execute(self, request: CallRequest) -> CallResponse:
        handler = self._handlers.get(request.fn_name)
        if handler is None:
            missing = ToolNotFoundError(request.fn_name)
            self._log_failure(request, missing)
            raise missing

        self._log_request(request)
        try:
            result = await handler.invoke_json(request.arguments)
            content = self._encode_content(handler.name, result)
        except DispatchError as exc:
            self._log_failure(request, exc)
            raise

        response = CallResponse(call_id=request.call_id, content=content)
        self._log_response(request, response)
        return response

    async def execute_batch(self, requests: Iterable[CallRequest]) -> list[CallResponse]:
        """Execute ``requests`` concurrently and return responses in input order.

        The first failing call (by completion; ties broken by input position)
        becomes the error of the whole batch and no responses are returned.
        Calls still running at that point are cancelled or left to finish in
        the background according to ``batch_policy``.
        """

        batch = list(requests)
        if not batch:
            return []

        tasks = [asyncio.ensure_future(self.execute(request)) for request in batch]
        position = {task: idx for idx, task in enumerate(tasks)}
        pending: set[asyncio.Future[CallResponse]] = set(tasks)

        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                failures = [
                    (position[task], exc)
                    for task in done
                    if not task.cancelled() and (exc := task.exception()) is not None
                ]
                if failures:
                    self._abandon(pending)
                    _, error = min(failures, key=lambda item: item[0])
                    raise error
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        return [task.result() for task in tasks]

    def _abandon(self, pending: set[asyncio.Future[CallResponse]]) -> None:
        for task in pending:
            if self.batch_policy is BatchPolicy.CANCEL:
                task.cancel()
            self._abandoned.add(task)
            task.add_done_callback(self._reap)
        if self.logger and pending:
            self.logger.debug(
                "batch failed; %s %d pending call(s)",
                "cancelled" if self.batch_policy is BatchPolicy.CANCEL else "detached",
                len(pending),
            )

    def _reap(self, task: asyncio.Future[CallResponse]) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None and self.logger:
            self.logger.debug("discarded result of abandoned call: %s", exc)

    @staticmethod
    def _encode_content(name: str, result: Any) -> str:
        try:
            return json.dumps(result, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise EncodeError(name, f"failed to encode result of tool '{name}': {exc}") from exc

    # logging

    def _log_request(self, request: CallRequest) -> None:
        if not self.logger:
            return
        self.logger.info(
            "tool request: %s call_id=%s args=%s",
            request.fn_name,
            request.call_id,
            self._stringify(request.arguments),
        )

    def _log_response(self, request: CallRequest, response: CallResponse) -> None:
        if not self.logger:
            return
        self.logger.debug(
            "tool response: %s call_id=%s content=%s",
            request.fn_name,
            response.call_id,
            self._truncate(response.content),
        )

    def _log_failure(self, request: CallRequest, exc: DispatchError) -> None:
        if not self.logger:
            return
        self.logger.warning(
            "tool failure: %s call_id=%s kind=%s error=%s",
            request.fn_name,
            request.call_id,
            exc.kind.value,
            exc,
        )

    def _stringify(self, obj: Any) -> str:
        try:
            text = json.dumps(obj, default=str)
        except (TypeError, ValueError):
            text = repr(obj)
        return self._truncate(text)

    def _truncate(self, text: str) -> str:
        if len(text) > self.payload_chars:
            return f"{text[: self.payload_chars]}... [truncated]"
        return text


__all__ = ["BatchPolicy", "ToolRegistry"]
