"""
openai_backend.py

Document-to-text backend built on the OpenAI Responses API.

The extraction stages only depend on the backend protocol:

    async generate(payload, prompt, max_output_tokens) -> str

Any object with that coroutine can replace OpenAIBackend (tests use an
in-memory fake). This is the ONLY file that talks to OpenAI.

The document travels as an `input_file` data URL next to the prompt, so each
request carries the whole document; the prompt selects the pages.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol

from screenplay_ingest.extraction.config import ExtractionConfig
from screenplay_ingest.extraction.document import DocumentPayload


class TextBackend(Protocol):
    async def generate(self, payload: DocumentPayload, prompt: str, max_output_tokens: int) -> str:
        ...


class OpenAIBackend:
    """
    Extract text from a document with an OpenAI model.

    Args:
        api_key: OpenAI API key.
        model: Model name (e.g. 'gpt-4o-mini').
        temperature: Kept low; the model should transcribe, not write.
        client: Pre-built AsyncOpenAI client; one is created when omitted.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        temperature: float = 0.1,
        client: Optional[Any] = None,
    ):
        if client is None:
            # Import OpenAI lazily to avoid a hard dependency for non-LLM tests
            from openai import AsyncOpenAI

            client = AsyncOpenAI(api_key=api_key)
        self._client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_config(cls, config: ExtractionConfig) -> "OpenAIBackend":
        if not config.api_key:
            raise ValueError("OpenAIBackend needs an api_key")
        return cls(config.api_key, config.model)

    async def generate(self, payload: DocumentPayload, prompt: str, max_output_tokens: int) -> str:
        resp = await self._client.responses.create(
            model=self.model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_file",
                            "filename": payload.filename,
                            "file_data": payload.data_url,
                        },
                        {"type": "input_text", "text": prompt},
                    ],
                }
            ],
            max_output_tokens=max_output_tokens,
            temperature=self.temperature,
        )
        return resp.output_text or ""
