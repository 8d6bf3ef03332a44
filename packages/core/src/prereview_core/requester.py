"""Schema-constrained review request against the model transport."""

from __future__ import annotations

import logging

from prereview_core.errors import ModelInvocationError
from prereview_core.models import ReviewRequest, ReviewResponse, ReviewResult
from prereview_core.providers.base import BaseGenerator, Generated, SchemaViolation, TransportError
from prereview_core.utils.cancel import CancelToken

_logger = logging.getLogger(__name__)


def request_review(
    generator: BaseGenerator,
    prompt: str,
    request: ReviewRequest,
    cancel: CancelToken | None = None,
    logger: logging.Logger | None = None,
) -> ReviewResponse:
    """Ask the model for a ReviewResult and unwrap the tagged outcome.

    Blocks until the transport answers. Transport failures and responses that
    do not match the schema both raise ModelInvocationError; nothing is retried.
    """
    logger = logger or _logger
    model = str(request.model)
    timeout = None
    if cancel is not None:
        timeout = cancel.remaining()

    logger.debug("system prompt: %s", request.system_prompt)
    outcome = generator.generate(
        system_prompt=request.system_prompt,
        user_prompt=prompt,
        model=request.model.name,
        schema=ReviewResult,
        max_tokens=request.max_output_tokens,
        timeout=timeout,
    )

    if isinstance(outcome, TransportError):
        logger.error("failed to generate review model=%s err=%s", model, outcome.cause)
        raise ModelInvocationError(
            f"failed to generate review with {model}: {outcome.cause}", model=model, cause=outcome.cause
        ) from outcome.cause
    if isinstance(outcome, SchemaViolation):
        logger.error("review result did not match schema model=%s", model)
        raise ModelInvocationError(
            f"review result from {model} did not match the review schema: {outcome.details}",
            model=model,
            cause=outcome,
        )
    if not isinstance(outcome, Generated):
        raise TypeError(f"unexpected generation outcome: {outcome!r}")

    logger.info(
        "llm review completed model=%s input_tokens=%d output_tokens=%d",
        outcome.metadata.model,
        outcome.metadata.input_tokens,
        outcome.metadata.output_tokens,
    )
    return ReviewResponse(result=outcome.result, metadata=outcome.metadata)
