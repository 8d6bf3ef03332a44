from __future__ import annotations

import json

from prereview_core.providers.base import SCHEMA_NAME, BaseGenerator, RawCompletion


class AnthropicGenerator(BaseGenerator):
    # Claude has no response-format switch, so the schema is enforced by
    # forcing the model to call a single tool whose input is the review.
    TOOL_DESCRIPTION = "Submit the structured pull request review."

    def __init__(self, api_key: str, base_url: str | None = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'prereview[anthropic]'"
            )
        # SDK retries are off: each generate() is at most one request.
        kwargs = {"api_key": api_key, "max_retries": 0}
        if base_url:
            kwargs["base_url"] = base_url
        self.client = Anthropic(**kwargs)

    def _call_api(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        json_schema: dict,
        max_tokens: int,
        timeout: float | None = None,
    ) -> RawCompletion:
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = self.client.messages.create(
            model=model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=max_tokens,
            tools=[{"name": SCHEMA_NAME, "description": self.TOOL_DESCRIPTION, "input_schema": json_schema}],
            tool_choice={"type": "tool", "name": SCHEMA_NAME},
            **kwargs,
        )
        tool_inputs = [
            block.input
            for block in response.content
            if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == SCHEMA_NAME
        ]
        # An empty payload fails validation downstream and becomes a SchemaViolation.
        text = json.dumps(tool_inputs[0]) if tool_inputs else ""
        return RawCompletion(
            text=text,
            model=response.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
