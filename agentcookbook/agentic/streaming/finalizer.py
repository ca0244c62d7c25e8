"""Result finalization for the terminal event."""

from loguru import logger

from agentcookbook.agentic.contract import OutputContract
from agentcookbook.agentic.streaming.events import ResultEvent
from agentcookbook.agentic.streaming.outcome import FailureKind, Outcome
from agentcookbook.exceptions import SchemaViolation


def finalize(
    event: ResultEvent,
    contract: OutputContract | None = None,
    accumulated_text: str = "",
) -> Outcome:
    """Turn a terminal result event into the session outcome.

    - Upstream failure: ``Failure(upstream_failure)`` with the subtype verbatim.
    - Success with a contract: the structured payload must validate, otherwise
      ``Failure(schema_violation)`` even though upstream reported success.
    - Success without a contract: the result text, falling back to the text
      accumulated during the session.

    Cost is left untouched; formatting is a caller concern.
    """
    if not event.succeeded:
        logger.info(f"Session failed upstream: {event.subtype}")
        return Outcome.failed(
            FailureKind.UPSTREAM_FAILURE,
            f"Agent reported {event.subtype}",
            subtype=event.subtype,
        )

    if contract is not None:
        try:
            payload = contract.validate(event.structured_output)
        except SchemaViolation as e:
            logger.warning(str(e))
            return Outcome.failed(
                FailureKind.SCHEMA_VIOLATION,
                str(e),
                errors=[{**d, "loc": list(d.get("loc", ()))} for d in e.details],
            )
        return Outcome.success(payload)

    text = event.result if event.result is not None else accumulated_text
    return Outcome.success(text)
