from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prereview_core.providers.base import SCHEMA_NAME, BaseGenerator, RawCompletion


class OpenAIGenerator(BaseGenerator):
    def __init__(self, api_key: str, base_url: str | None = None):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. "
                "Install it with: pip install 'prereview[openai]'"
            )
        self.client = _OpenAI(api_key=api_key, base_url=base_url, max_retries=0)

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
        response = self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": SCHEMA_NAME, "schema": json_schema, "strict": True},
            },
            **kwargs,
        )
        usage = response.usage
        return RawCompletion(
            text=response.choices[0].message.content or "",
            model=response.model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
