"""
Legal chat flow.

Answers a single legal question, optionally grounded in an attached document:
1. Validate the query and document reference.
2. Build a prompt carrying the topicality gate and disclaimer rules.
3. Call the LLM for a structured answer.
4. Validate the answer against the ChatAnswer schema.

Whether a question is legal in nature is decided by the model. The flow does
not classify or rewrite answers; it only logs when an answer follows neither
the refusal nor the disclaimer template. No conversation history is sent.
"""

import logging

from legallyeasy.core.telemetry import get_tracer
from legallyeasy.models.chat import ChatAnswer, ChatQuery
from legallyeasy.services.openai_client import OpenAIService
from legallyeasy.services.validation import parse_input, parse_output

logger = logging.getLogger(__name__)

REFUSAL_MESSAGE = (
    "This query does not appear to be related to legal matters. "
    "As LegallyEasy AI, I can only assist with legal questions."
)

DISCLAIMER = (
    "As LegallyEasy AI, I can provide information, but this is not legal advice. "
    "For specific legal issues, please consult a qualified legal professional."
)

SYSTEM_PROMPT = f"""\
You are **LegallyEasy AI**, a specialized legal information assistant. \
Your goal is to provide helpful and informative answers to legal questions.

## Rules
1. First decide whether the user's question is related to legal matters.
2. If it is NOT related to legal matters, your entire response must be exactly:
   "{REFUSAL_MESSAGE}"
   Do not add anything before or after that sentence and do not answer the question.
3. If it IS related to legal matters, ALWAYS begin your response with exactly:
   "{DISCLAIMER}"
   Then address the user's question.
4. If a document is attached, use its content as context for your answer and \
refer to it by its name.
"""

ANSWER_FIELD_DESCRIPTION = "The AI's answer to the legal question."


class LegalChatFlow:
    """Answers legal questions with a fixed disclaimer and an off-topic refusal."""

    def __init__(self, openai_service: OpenAIService) -> None:
        self._openai = openai_service
        self._tracer = get_tracer()

    async def legal_chat(
        self,
        query: str | None,
        document_data_uri: str | None = None,
        document_name: str | None = None,
    ) -> ChatAnswer:
        """Invocation form used by callers holding raw strings."""
        data: dict = {"query": query or ""}
        if document_data_uri is not None:
            data["document"] = {"data_uri": document_data_uri, "name": document_name}
        return await self.answer(parse_input(ChatQuery, data))

    async def answer(self, chat_query: ChatQuery) -> ChatAnswer:
        """
        Answer a validated question.

        Raises:
            InvalidInputError: if the attached document cannot be decoded.
            UpstreamError: if the model call fails or its output does not
                match the ChatAnswer schema.
        """
        with self._tracer.start_as_current_span("flow.legal_chat") as span:
            documents = [chat_query.document.decode()] if chat_query.document else []
            span.set_attribute("chat.query_length", len(chat_query.query))
            span.set_attribute("chat.has_document", bool(documents))

            raw = await self._openai.structured_completion(
                system_prompt=SYSTEM_PROMPT,
                question=self._build_question(chat_query.query, bool(documents)),
                documents=documents,
                output_field="response",
                field_description=ANSWER_FIELD_DESCRIPTION,
            )
            answer = parse_output(ChatAnswer, raw)

            span.set_attribute("chat.refused", answer.response == REFUSAL_MESSAGE)
            self._check_template(answer.response)
            return answer

    @staticmethod
    def _build_question(query: str, has_document: bool) -> str:
        if has_document:
            return f"## Question\n\nUsing the attached document as context: {query}"
        return f"## Question\n\n{query}"

    @staticmethod
    def _check_template(response: str) -> bool:
        """Log answers that follow neither the refusal nor the disclaimer template."""
        if response == REFUSAL_MESSAGE:
            return True
        if response.startswith(DISCLAIMER) and REFUSAL_MESSAGE not in response:
            return True
        logger.warning("Answer does not follow the refusal or disclaimer template.")
        return False
