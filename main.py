"""Command-line entry points for the Minnesota Medicaid assistant."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from medicaid_rag import logger
from medicaid_rag.config import PipelineConfig
from medicaid_rag.errors import ConfigurationError, RagError
from medicaid_rag.pipeline import RAGPipeline
from medicaid_rag.sources import DEFAULT_SOURCES

EXIT_COMMANDS = {"exit", "quit", "bye", "goodbye"}
GENERIC_ERROR_MESSAGE = "Something went wrong, please try again."


def _load_config(config_path: str | None) -> PipelineConfig:
    if not config_path:
        return PipelineConfig.from_env()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with path.open("r", encoding="utf-8") as file:
        data = json.load(file)

    return PipelineConfig.from_env(PipelineConfig.from_dict(data))


def run_ingest(pipeline: RAGPipeline, sources: Iterable[str], keep_existing: bool = False) -> None:
    source_list = list(sources) or list(DEFAULT_SOURCES)
    if not keep_existing:
        print("Clearing existing documents from vector store...")
        pipeline.clear_all()
    count = pipeline.ingest(source_list)
    print(f"Loaded {count} segments from {len(source_list)} sources.")


def run_query(pipeline: RAGPipeline, question: str) -> None:
    try:
        response = pipeline.respond(question)
    except RagError as exc:
        logger.error(f"Query failed: {exc}", "main.query")
        print(GENERIC_ERROR_MESSAGE)
        raise SystemExit(1) from exc

    print("Answer:")
    print(response.answer)
    if response.references:
        print("\nSources:")
        for reference in response.references:
            print(f"- {reference['title']} ({reference['source']})")


def run_chat(pipeline: RAGPipeline, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> List[str]:
    """Interactive loop; returns the transcript it built."""

    history: List[str] = []
    print("=" * 60, file=stdout)
    print("Welcome to the Minnesota Medicaid Assistant!", file=stdout)
    print("Ask about eligibility, benefits, and programs. Type 'exit' to quit.", file=stdout)
    print("=" * 60, file=stdout)

    while True:
        print("\nYou: ", end="", file=stdout, flush=True)
        line = stdin.readline()
        if not line:
            break
        user_input = line.strip()
        if not user_input:
            continue
        if user_input.lower() in EXIT_COMMANDS:
            break

        try:
            answer = pipeline.answer(user_input, history)
        except RagError as exc:
            logger.error(f"Chat turn failed: {exc}", "main.chat")
            print(GENERIC_ERROR_MESSAGE, file=stdout)
            continue

        history.append(f"User: {user_input}")
        history.append(f"Assistant: {answer}")
        print(f"Medicaid Assistant: {answer}", file=stdout)

    print("\nGoodbye!", file=stdout)
    return history


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Minnesota Medicaid RAG assistant")
    parser.add_argument("command", choices=["ingest", "clear", "query", "chat"], help="Action to run")
    parser.add_argument("sources", nargs="*", help="URLs or file paths to ingest (defaults to the built-in list)")
    parser.add_argument("--question", help="Question to ask with the 'query' command")
    parser.add_argument("--keep", action="store_true", help="Do not clear the vector store before ingesting")
    parser.add_argument("--config", help="Path to a JSON file with the pipeline configuration")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_arguments(argv)
    try:
        config = _load_config(args.config)
        pipeline = RAGPipeline(config=config)
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    if args.command == "ingest":
        run_ingest(pipeline, args.sources, keep_existing=args.keep)
    elif args.command == "clear":
        pipeline.clear_all()
        print("Vector store cleared.")
    elif args.command == "query":
        if not args.question:
            raise SystemExit("Provide a question with --question.")
        run_query(pipeline, args.question)
    elif args.command == "chat":
        run_chat(pipeline)


if __name__ == "__main__":
    main()
