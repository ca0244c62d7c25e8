"""
Session Consumer
================

Consumes the ordered stream of messages an agent session produces and turns
it into exactly one Outcome.

EVENT CLASSIFICATION
--------------------

| Event           | Legal when                      | What we do                                  |
|-----------------|---------------------------------|---------------------------------------------|
| InitEvent       | first event only                | Record session_id and the declared tools    |
| TextEvent       | after init, before result       | Append to accumulated text                  |
| ToolCallEvent   | after init, before result       | Record invocation, count a turn             |
| DelegationEvent | after init, before result       | Same as a tool call, plus record delegation |
| ResultEvent     | after init, last event          | Finalize (validate contract), record cost   |

Anything else is a ProtocolError: a second init, a non-init first event,
a result before init, or any event after the result.

Tool names outside the declared tools (and outside every sub-agent's tools)
are recorded with a warning rather than rejected. The event source is
authoritative about what it invoked.

THE LOOP
--------
``consume()`` is a single-threaded cooperative loop. Its only suspension
point is awaiting the next message. Cancellation (an ``asyncio.Event``) is
raced against that await, so an abort takes effect between events and never
in the middle of applying one. The source is closed on every exit path.

Local conditions detected by the loop:
- no events at all             -> Failure(no_events)
- source ends without a result -> Failure(stream_closed_early)
- turn_count > max_turns       -> Failure(turn_limit_exceeded), stops at once
- cancel event set             -> Failure(cancelled)

``consume()`` never raises ProtocolError, SchemaViolation or
TurnLimitExceeded; callers branch on the returned Outcome.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterable, AsyncIterator, Callable

from loguru import logger

from agentcookbook.agentic.schema import AgentOptions
from agentcookbook.agentic.streaming.events import (
    DELEGATION_TOOL,
    DelegationEvent,
    InitEvent,
    ResultEvent,
    SessionEvent,
    TextEvent,
    ToolCallEvent,
)
from agentcookbook.agentic.streaming.finalizer import finalize
from agentcookbook.agentic.streaming.handlers import normalize_message, summarize_tool_input
from agentcookbook.agentic.streaming.outcome import FailureKind, Outcome
from agentcookbook.agentic.streaming.state import (
    AppendOnlyLog,
    Delegation,
    SessionState,
    ToolInvocation,
)
from agentcookbook.exceptions import ProtocolError, TurnLimitExceeded

EventCallback = Callable[[SessionEvent, SessionState], None]


class _CancelRequested(Exception):
    """Cancel event won the race against the next message."""


@asynccontextmanager
async def _open_stream(source: AsyncIterable[Any]) -> AsyncIterator[AsyncIterator[Any]]:
    """Yield an iterator over the source and always close it afterwards."""
    iterator = source.__aiter__()
    try:
        yield iterator
    finally:
        for target in (iterator, source):
            aclose = getattr(target, "aclose", None)
            if aclose is not None:
                await aclose()
                break


async def _anext(iterator: AsyncIterator[Any]) -> Any:
    return await iterator.__anext__()


async def _next_message(iterator: AsyncIterator[Any], cancel: asyncio.Event | None) -> Any:
    """Await the next message, or raise _CancelRequested if cancel is set first."""
    if cancel is None:
        return await iterator.__anext__()
    if cancel.is_set():
        raise _CancelRequested()

    next_task = asyncio.create_task(_anext(iterator))
    cancel_task = asyncio.create_task(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {next_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (next_task, cancel_task):
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    # A message that arrived together with the cancel signal is still applied
    if next_task in done:
        return next_task.result()
    raise _CancelRequested()


class SessionConsumer:
    """Consumes one agent session's event stream.

    One instance per session; holds no state across sessions. Nested
    sub-agent streams, if observed, need their own consumer.

    Example:
        consumer = SessionConsumer(options)
        outcome = await consumer.consume(query_agent(prompt, options))
        if outcome.is_success:
            print(outcome.payload)
    """

    def __init__(
        self,
        options: AgentOptions | None = None,
        *,
        on_event: EventCallback | None = None,
    ) -> None:
        self.options = options or AgentOptions()
        self.contract = self.options.contract()
        self.on_event = on_event
        self.state = SessionState(model=self.options.model)
        self._subagent_tools = self.options.subagent_tools()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def outcome(self) -> Outcome:
        return self.state.outcome

    @property
    def tool_invocations(self) -> tuple[ToolInvocation, ...]:
        return self.state.tracker.snapshot()

    @property
    def subagent_delegations(self) -> tuple[Delegation, ...]:
        return self.state.subagent_delegations.snapshot()

    @property
    def warnings(self) -> AppendOnlyLog[str]:
        return self.state.warnings

    # ------------------------------------------------------------------
    # Event classifier
    # ------------------------------------------------------------------

    def push(self, event: SessionEvent) -> Outcome | None:
        """Apply one event to the session.

        Returns:
            The terminal Outcome when ``event`` is the result event, else None

        Raises:
            ProtocolError: if the event breaks session ordering
            TurnLimitExceeded: if this tool call takes turn_count past max_turns
        """
        state = self.state
        if state.terminated:
            raise ProtocolError(f"'{event.type}' event received after the result event")

        first = state.events_seen == 0
        state.events_seen += 1

        if isinstance(event, InitEvent):
            if state.initialized:
                raise ProtocolError("Duplicate init event")
            if not first:
                raise ProtocolError("Init event must be the first event of a session")
            state.initialize(event.session_id, event.tools, event.model or self.options.model)
            logger.debug(f"Session {event.session_id} initialized with tools: {sorted(event.tools)}")
            return None

        if not state.initialized:
            raise ProtocolError(f"'{event.type}' event received before init")

        if isinstance(event, TextEvent):
            state.append_text(event.text)
            return None

        if isinstance(event, (ToolCallEvent, DelegationEvent)):
            self._record_tool_call(event)
            return None

        if isinstance(event, ResultEvent):
            return self._finish(event)

        raise TypeError(f"Unhandled session event: {type(event).__name__}")

    def feed(self, message: Any) -> Outcome | None:
        """Normalize one raw message and push the resulting events.

        Raises:
            ProtocolError: if the message is malformed or breaks ordering
            TurnLimitExceeded: see push()
        """
        try:
            events = normalize_message(message)
        except ValueError as e:
            raise ProtocolError(str(e)) from e

        outcome = None
        for event in events:
            outcome = self.push(event)
            if self.on_event is not None:
                self.on_event(event, self.state)
        return outcome

    def _record_tool_call(self, event: ToolCallEvent | DelegationEvent) -> None:
        state = self.state
        state.tracker.record(
            event.tool_name,
            summarize_tool_input(event.tool_name, event.arguments),
            event.tool_id,
        )
        turn = state.metrics.add_turn()

        if isinstance(event, DelegationEvent):
            state.subagent_delegations.append(Delegation(event.subagent_type, event.tool_id))
            logger.debug(f"Delegating to sub-agent: {event.subagent_type}")
        elif (
            event.tool_name not in state.available_tools
            and event.tool_name not in self._subagent_tools
            and event.tool_name != DELEGATION_TOOL
        ):
            warning = f"Tool '{event.tool_name}' is not in the session's declared tools"
            state.add_warning(warning)
            logger.warning(warning)

        logger.debug(f"Turn {turn}: {event.tool_name}")

        if state.metrics.exceeds(self.options.max_turns):
            raise TurnLimitExceeded(turn, self.options.max_turns)

    def _finish(self, event: ResultEvent) -> Outcome:
        state = self.state
        outcome = finalize(event, self.contract, state.get_full_text())
        state.metrics.record_cost(event.total_cost_usd)
        if outcome.is_success and self.contract is not None:
            state.structured_output = outcome.payload
        state.set_outcome(outcome)
        return outcome

    # ------------------------------------------------------------------
    # Streaming loop
    # ------------------------------------------------------------------

    async def consume(
        self,
        source: AsyncIterable[Any],
        cancel: asyncio.Event | None = None,
    ) -> Outcome:
        """Consume the whole stream and return the session's terminal Outcome.

        Args:
            source: Async iterable of SDK messages or session events
            cancel: Optional event; setting it stops iteration between events

        Returns:
            Terminal Outcome (never Pending)
        """
        state = self.state
        failure: Outcome | None = None

        async with _open_stream(source) as messages:
            while not state.terminated:
                try:
                    message = await _next_message(messages, cancel)
                except StopAsyncIteration:
                    break
                except _CancelRequested:
                    failure = Outcome.failed(FailureKind.CANCELLED, "Session cancelled by caller")
                    break
                except Exception as e:
                    logger.error(f"Event source failed: {e}")
                    failure = Outcome.failed(FailureKind.STREAM_CLOSED_EARLY, f"Event source failed: {e}")
                    break

                try:
                    self.feed(message)
                except ProtocolError as e:
                    logger.error(f"Protocol error: {e}")
                    failure = Outcome.failed(FailureKind.PROTOCOL_ERROR, str(e))
                    break
                except TurnLimitExceeded as e:
                    logger.warning(str(e))
                    failure = Outcome.failed(FailureKind.TURN_LIMIT_EXCEEDED, str(e))
                    break

        if not state.terminated:
            if failure is None:
                if state.events_seen == 0:
                    failure = Outcome.failed(FailureKind.NO_EVENTS, "Event stream was empty")
                else:
                    failure = Outcome.failed(
                        FailureKind.STREAM_CLOSED_EARLY,
                        "Event stream ended without a result event",
                    )
            state.set_outcome(failure)

        logger.info(
            f"Session {state.session_id or '<uninitialized>'} finished: {state.outcome.reason} "
            f"({state.tracker.count} tool calls, ${state.total_cost_usd})"
        )
        return state.outcome
