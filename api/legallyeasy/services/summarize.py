"""
Summarization flow.

Validates the document reference, asks the model for a concise summary of
the attached document and validates the structured result.
"""

import logging

from legallyeasy.core.telemetry import get_tracer
from legallyeasy.models.summarize import SummarizeRequest, SummarizeResult
from legallyeasy.services.openai_client import OpenAIService
from legallyeasy.services.validation import parse_input, parse_output

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = """\
You are LegallyEasy AI, a specialized legal document assistant.

Read the attached document carefully and produce a concise summary of its content.
- Cover the purpose of the document, the parties involved, key obligations, \
important dates and amounts, and any notable clauses or risks.
- Use plain language a non-lawyer can follow.
- Summarize only what the document says; do not add outside facts.
"""

SUMMARY_FIELD_DESCRIPTION = "A concise summary of the document."


class SummarizationFlow:
    """Turns an inline document into a plain-text summary."""

    def __init__(self, openai_service: OpenAIService) -> None:
        self._openai = openai_service
        self._tracer = get_tracer()

    async def summarize_document(
        self,
        document_data_uri: str | None,
        document_name: str | None = None,
    ) -> SummarizeResult:
        """Invocation form used by callers holding a raw data URI."""
        request = parse_input(
            SummarizeRequest,
            {"document": {"data_uri": document_data_uri or "", "name": document_name}},
        )
        return await self.summarize(request)

    async def summarize(self, request: SummarizeRequest) -> SummarizeResult:
        """
        Summarize a validated document.

        Raises:
            InvalidInputError: if the document cannot be decoded.
            UpstreamError: if the model call fails or its output does not
                match the SummarizeResult schema.
        """
        with self._tracer.start_as_current_span("flow.summarize") as span:
            document = request.document.decode()
            span.set_attribute("document.mime_type", document.mime_type)
            span.set_attribute("document.size_bytes", len(document.data))

            raw = await self._openai.structured_completion(
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                question=f"Summarize the attached document '{document.display_name}'.",
                documents=[document],
                output_field="summary",
                field_description=SUMMARY_FIELD_DESCRIPTION,
            )
            result = parse_output(SummarizeResult, raw)

            logger.info(
                "Summarized %s (%d bytes) into %d characters",
                document.mime_type,
                len(document.data),
                len(result.summary),
            )
            return result
