"""Base generator implementing the Template Method pattern.

All providers share the same structured-generation algorithm:
    generate() → schema = output model's JSON schema
               → _call_api()          ← only this differs per provider
               → validate against the output model

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call constrained to the schema and return
    the JSON text plus the usage the service reported

The result is a tagged outcome, never a coerced value: a response that does
not validate is a SchemaViolation, an SDK exception is a TransportError.
There is deliberately no retry here; the caller decides what a failure means.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ValidationError

from prereview_core.models import CallMetadata

logger = logging.getLogger(__name__)

SCHEMA_NAME = "review_result"


@dataclass(frozen=True)
class RawCompletion:
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class Generated:
    result: BaseModel
    metadata: CallMetadata


@dataclass(frozen=True)
class SchemaViolation:
    details: str
    raw: str = ""


@dataclass(frozen=True)
class TransportError:
    cause: BaseException


GenerationOutcome = Union[Generated, SchemaViolation, TransportError]


class BaseGenerator(ABC):
    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        schema: type[BaseModel],
        max_tokens: int,
        timeout: float | None = None,
    ) -> GenerationOutcome:
        """Run one schema-constrained completion and validate the response."""
        try:
            raw = self._call_api(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                model=model,
                json_schema=schema.model_json_schema(),
                max_tokens=max_tokens,
                timeout=timeout,
            )
        except Exception as e:
            logger.error("%s API call failed: %s", self.__class__.__name__, e)
            return TransportError(cause=e)

        metadata = CallMetadata(model=raw.model, input_tokens=raw.input_tokens, output_tokens=raw.output_tokens)
        try:
            result = schema.model_validate_json(raw.text)
        except ValidationError as e:
            logger.warning(
                "%s: response does not match %s: %s",
                self.__class__.__name__,
                schema.__name__,
                raw.text[:200],
            )
            return SchemaViolation(details=str(e), raw=raw.text)
        return Generated(result=result, metadata=metadata)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        json_schema: dict,
        max_tokens: int,
        timeout: float | None = None,
    ) -> RawCompletion:
        """Make a single API call and return the raw JSON text and usage.

        It should raise on failure; generate() turns the exception into a
        TransportError.
        """
