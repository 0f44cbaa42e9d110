"""
@file: __main__.py
Main entry point for the BERT QA CLI.

This module provides a command-line interface for asking questions about a context passage:
- Single question mode (--question)
- Interactive mode (no --question), reading questions until 'exit'

It handles argument parsing, configuration loading, logging setup, and cancellation on Ctrl-C.
"""

#!/usr/bin/env python3

import argparse
import asyncio
import concurrent.futures
import logging
import signal
import sys
import threading
from pathlib import Path

from bert_qa.cancellation import CancellationToken
from bert_qa.config import get_config
from bert_qa.exceptions import BertQAError, QACancelledError, ValidationError
from bert_qa.logging_setup import setup_logging
from bert_qa.qa_engine import BertQA

logger = logging.getLogger(__name__)

NO_ANSWER = "(no answer found)"

def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments for the BERT QA CLI.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="BERT QA - answer questions about a text passage"
    )

    context_group = parser.add_mutually_exclusive_group(required=True)
    context_group.add_argument(
        "--context",
        help="Context passage to answer questions about"
    )
    context_group.add_argument(
        "--context-file",
        help="Path to a text file holding the context passage"
    )

    parser.add_argument(
        "--question",
        help="Question to answer. If omitted, enters interactive mode."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--show-span",
        action="store_true",
        help="Print the token span and score with each answer"
    )

    return parser.parse_args(argv)

def load_context(args: argparse.Namespace) -> str:
    """Return the context passage from --context or --context-file."""
    if args.context is not None:
        return args.context
    path = Path(args.context_file)
    if not path.is_file():
        raise ValidationError(f"Context file not found: {path}")
    return path.read_text(encoding="utf-8")

def print_answer(answer, show_span: bool = False) -> None:
    print(f"Answer: {answer.text or NO_ANSWER}")
    if show_span:
        print(f"  tokens [{answer.span.start}, {answer.span.end}], score {answer.span.score:.3f}")

async def process_question(engine, context: str, question: str, show_span: bool = False) -> int:
    """Answer a single question.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    logger.info(f"Called process_question(question={question!r})")
    answer = await engine.answer(context, question)
    print_answer(answer, show_span)
    return 0

def _read_line(prompt: str, future: concurrent.futures.Future) -> None:
    try:
        future.set_result(input(prompt))
    except Exception as e:
        future.set_exception(e)

async def read_line(prompt: str) -> str:
    """Read one line from stdin on a daemon thread, outside the default executor."""
    future = concurrent.futures.Future()
    # Running, so cancelling the awaiting task leaves the reader free to finish
    future.set_running_or_notify_cancel()
    threading.Thread(target=_read_line, args=(prompt, future), name="stdin-reader", daemon=True).start()
    return await asyncio.wrap_future(future)

async def process_interactive(engine, context: str, show_span: bool = False) -> int:
    """Read questions from stdin until 'exit', answering each one."""
    print("Enter your questions (type 'exit' to quit):")
    while True:
        question = (await read_line("\nQuestion: ")).strip()
        if question.lower() in ('exit', 'quit'):
            break
        if not question:
            continue
        try:
            answer = await engine.answer(context, question)
        except ValidationError as e:
            print(f"Invalid question: {e}")
            continue
        print_answer(answer, show_span)
    return 0

def install_interrupt_handler(token: CancellationToken) -> bool:
    """Fire the token and cancel the current task as soon as SIGINT arrives.

    Returns False where the loop cannot take signal handlers (Windows, or off the main thread).
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()

    def interrupt():
        logger.warning("Cancellation requested")
        token.cancel()
        task.cancel()

    try:
        loop.add_signal_handler(signal.SIGINT, interrupt)
    except (NotImplementedError, RuntimeError) as e:
        logger.debug(f"SIGINT handler not installed: {e}")
        return False
    return True

async def run(args: argparse.Namespace, config, token: CancellationToken) -> int:
    installed = install_interrupt_handler(token)
    try:
        context = load_context(args)
        engine = BertQA(config, token=token)
        if args.question:
            return await process_question(engine, context, args.question, args.show_span)
        return await process_interactive(engine, context, args.show_span)
    finally:
        if installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)

def main(argv=None) -> int:
    """Main entry point for the BERT QA CLI.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)
    token = CancellationToken()
    try:
        config = get_config(args.config)

        log_level = "DEBUG" if args.debug else config.get_nested('LOGGING.LEVEL', 'INFO')
        setup_logging(
            LOG_FILE=config.get_nested('LOGGING.LOG_FILE', 'logs/bert_qa.log'),
            LEVEL=log_level
        )
        return asyncio.run(run(args, config, token))

    except (KeyboardInterrupt, EOFError, asyncio.CancelledError):
        token.cancel()
        print("\nExiting...")
        return 1
    except QACancelledError as e:
        logger.warning(str(e))
        return 1
    except BertQAError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.critical(f"Unexpected error: {str(e)}", exc_info=True)
        return 1

if __name__ == "__main__":
    sys.exit(main())
