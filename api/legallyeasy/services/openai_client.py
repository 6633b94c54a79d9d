"""
Azure OpenAI client wrapper.

Sends a single prompt, optionally with inline document attachments, and asks
for JSON output constrained to one named string field. Retries are disabled:
any provider failure is raised as UpstreamError.
Uses DefaultAzureCredential (Managed Identity in production, az login locally)
unless an API key is configured.
"""

import logging
from typing import Any

import openai
from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from openai import AsyncAzureOpenAI

from legallyeasy.core.config import Settings
from legallyeasy.core.errors import UpstreamError
from legallyeasy.core.telemetry import get_tracer
from legallyeasy.models.documents import InlineDocument

logger = logging.getLogger(__name__)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


def build_output_schema(field_name: str, description: str) -> dict[str, Any]:
    """JSON schema for a response holding a single required string field."""
    return {
        "name": f"{field_name}_output",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                field_name: {"type": "string", "description": description},
            },
            "required": [field_name],
            "additionalProperties": False,
        },
    }


class OpenAIService:
    """Wrapper around Azure OpenAI for schema-constrained chat completions."""

    def __init__(self, settings: Settings, client: AsyncAzureOpenAI | None = None) -> None:
        self._settings = settings
        self._tracer = get_tracer()
        self._client = client or self._create_client(settings)

    @staticmethod
    def _create_client(settings: Settings) -> AsyncAzureOpenAI:
        common = {
            "azure_endpoint": settings.azure_openai_endpoint,
            "api_version": settings.azure_openai_api_version,
            "timeout": settings.openai_timeout_seconds,
            "max_retries": 0,
        }
        if settings.azure_openai_api_key:
            return AsyncAzureOpenAI(api_key=settings.azure_openai_api_key, **common)

        # Use Entra ID token-based auth
        token_provider = get_bearer_token_provider(
            DefaultAzureCredential(),
            COGNITIVE_SERVICES_SCOPE,
        )
        return AsyncAzureOpenAI(azure_ad_token_provider=token_provider, **common)

    @property
    def model(self) -> str:
        return self._settings.azure_openai_chat_deployment

    async def structured_completion(
        self,
        system_prompt: str,
        question: str,
        documents: list[InlineDocument],
        output_field: str,
        field_description: str,
    ) -> str:
        """
        Generate a completion constrained to a single string field.

        Args:
            system_prompt: Instructions for the model.
            question: The user-facing part of the prompt.
            documents: Inline attachments, placed before the question.
            output_field: Name of the JSON field the model must fill.
            field_description: Description of that field for the model.

        Returns:
            The raw JSON text returned by the model.

        Raises:
            UpstreamError: on timeout, connection or API failure, or when the
                model returns no content.
        """
        with self._tracer.start_as_current_span("openai.structured_completion") as span:
            span.set_attribute("openai.model", self.model)
            span.set_attribute("openai.attachments", len(documents))

            messages = self._build_messages(system_prompt, question, documents)
            try:
                response = await self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self._settings.llm_temperature,
                    response_format={
                        "type": "json_schema",
                        "json_schema": build_output_schema(output_field, field_description),
                    },
                )
            except openai.OpenAIError as exc:
                logger.error("Chat completion failed: %s", exc)
                raise UpstreamError(f"The language model request failed: {exc}", cause=exc) from exc

            if not response.choices:
                raise UpstreamError("The language model returned no choices.", cause=response)

            message = response.choices[0].message
            if getattr(message, "refusal", None):
                raise UpstreamError(
                    f"The language model refused the request: {message.refusal}",
                    cause=message,
                )
            if not message.content:
                raise UpstreamError("The language model returned an empty response.", cause=message)

            if response.usage:
                span.set_attribute("openai.prompt_tokens", response.usage.prompt_tokens)
                span.set_attribute("openai.completion_tokens", response.usage.completion_tokens)
                logger.info("Chat completion: %d tokens used", response.usage.total_tokens)

            return message.content

    @staticmethod
    def _build_messages(
        system_prompt: str,
        question: str,
        documents: list[InlineDocument],
    ) -> list[dict[str, Any]]:
        """Assemble the system message and a multi-part user message."""
        content: list[dict[str, Any]] = []
        for doc in documents:
            content.extend(OpenAIService._document_parts(doc))
        content.append({"type": "text", "text": question})

        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": content},
        ]

    @staticmethod
    def _document_parts(doc: InlineDocument) -> list[dict[str, Any]]:
        """Text documents are inlined; anything else travels as an attachment."""
        header = f"## Attached Document: {doc.display_name} ({doc.mime_type})"
        if doc.is_text:
            return [{"type": "text", "text": f"{header}\n\n{doc.text()}"}]
        if doc.is_image:
            return [
                {"type": "text", "text": header},
                {"type": "image_url", "image_url": {"url": doc.data_uri}},
            ]
        return [
            {"type": "text", "text": header},
            {
                "type": "file",
                "file": {"filename": doc.display_name, "file_data": doc.data_uri},
            },
        ]
