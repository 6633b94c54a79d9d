"""
Command-line client for LegallyEasy.

Reads local files, encodes them as data URIs and drives the summarization
and legal chat flows in-process. The chat transcript lives here and is
never sent to the model.

Usage:
    legallyeasy summarize ./contracts/lease.pdf
    legallyeasy chat --question "Can my landlord evict me without notice?"
    legallyeasy chat --document ./contracts/lease.pdf
    legallyeasy serve --port 8000
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from legallyeasy.core.config import get_settings
from legallyeasy.core.errors import InvalidInputError, LegallyEasyError
from legallyeasy.core.telemetry import setup_telemetry, shutdown_telemetry
from legallyeasy.models.chat import ChatMessage, ChatTranscript
from legallyeasy.services.legal_chat import LegalChatFlow
from legallyeasy.services.openai_client import OpenAIService
from legallyeasy.services.summarize import SummarizationFlow
from legallyeasy.services.uploads import read_document

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = "Please enter a question."
EXIT_COMMANDS = {"exit", "quit"}


def error_reply(message: str) -> str:
    """Synthetic assistant message shown when a chat turn fails."""
    reason = message.rstrip(".") or "Unknown error"
    return f"Sorry, I encountered an error: {reason}. Please try again."


async def run_chat_turn(
    flow: LegalChatFlow,
    transcript: ChatTranscript,
    query: str,
    document_data_uri: str | None = None,
    document_name: str | None = None,
) -> ChatMessage | None:
    """
    Send one question and record both sides of the exchange.

    Blank questions are rejected without calling the flow and leave the
    transcript untouched. Failures become a synthetic assistant message
    rather than a fabricated answer.
    """
    query = query.strip()
    if not query:
        logger.warning(EMPTY_QUERY_MESSAGE)
        return None

    transcript.append("user", query)
    try:
        answer = await flow.legal_chat(
            query=query,
            document_data_uri=document_data_uri,
            document_name=document_name,
        )
    except LegallyEasyError as exc:
        logger.error("Chat error: %s", exc.message)
        return transcript.append("assistant", error_reply(exc.message))

    return transcript.append("assistant", answer.response)


def _build_openai_service() -> OpenAIService:
    settings = get_settings()
    setup_telemetry(settings)
    return OpenAIService(settings)


def _serve(host: str, port: int, reload: bool) -> int:
    uvicorn.run("legallyeasy.main:app", host=host, port=port, reload=reload)
    return 0


async def _summarize(file_path: str) -> int:
    settings = get_settings()
    try:
        data_uri, file_name = read_document(file_path, settings.max_document_bytes)
        flow = SummarizationFlow(_build_openai_service())
        result = await flow.summarize_document(data_uri, file_name)
    except LegallyEasyError as exc:
        logger.error("Summarization failed: %s", exc.message)
        return 1

    print(result.summary)
    return 0


async def _chat(question: str | None, document_path: str | None) -> int:
    settings = get_settings()
    data_uri = file_name = None
    if document_path:
        try:
            data_uri, file_name = read_document(document_path, settings.max_document_bytes)
        except InvalidInputError as exc:
            logger.error("Cannot attach document: %s", exc.message)
            return 1

    flow = LegalChatFlow(_build_openai_service())
    transcript = ChatTranscript()

    if question is not None:
        reply = await run_chat_turn(flow, transcript, question, data_uri, file_name)
        if reply is None:
            return 1
        print(reply.content)
        return 0

    print("Ask a legal question (type 'exit' to quit).")
    while True:
        try:
            line = await asyncio.to_thread(input, "You: ")
        except EOFError:
            break
        if line.strip().lower() in EXIT_COMMANDS:
            break
        reply = await run_chat_turn(flow, transcript, line, data_uri, file_name)
        if reply is not None:
            print(f"LegallyEasy AI: {reply.content}\n")

    logger.info("Chat session ended after %d messages", len(transcript))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="legallyeasy",
        description="LegallyEasy AI: document summaries and legal questions",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize_parser = subparsers.add_parser("summarize", help="Summarize a document")
    summarize_parser.add_argument("file", help="Path to a PDF, Word, text or Markdown file (max 5 MB)")

    chat_parser = subparsers.add_parser("chat", help="Ask legal questions")
    chat_parser.add_argument(
        "--question", help="Ask a single question and exit (default: interactive session)"
    )
    chat_parser.add_argument(
        "--document", help="Optional document to use as context for every question"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.command == "serve":
        return _serve(args.host, args.port, args.reload)
    try:
        if args.command == "summarize":
            return asyncio.run(_summarize(args.file))
        return asyncio.run(_chat(args.question, args.document))
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    sys.exit(main())
