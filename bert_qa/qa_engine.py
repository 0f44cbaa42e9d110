"""
QA Engine answering questions about a context passage with BERT.
"""
import asyncio
import logging
import threading
from typing import Any, List, Optional, Tuple

import numpy as np

from .answer import Answer, extract_answer
from .cancellation import CancellationToken
from .exceptions import ValidationError
from .model_manager import AcquisitionState, ModelManager
from .session import ModelSession
from .tensors import EncodedBatch
from .tokenizer import Token, WordPieceTokenizer

# Get logger for this module
logger = logging.getLogger(__name__)

class BertQA:
    """Extractive question answering over a single context passage.

    Model acquisition starts as soon as the engine is constructed. Questions
    can be asked right away: they are tokenized immediately and wait for the
    model only when they need to run it.
    """

    def __init__(
        self,
        config: Any,
        token: Optional[CancellationToken] = None,
        tokenizer: Optional[WordPieceTokenizer] = None,
        model_manager: Optional[ModelManager] = None,
    ):
        """Initialize the engine and start acquiring the model.

        Args:
            config: Configuration object with get_nested
            token: Cancellation token shared with model acquisition
            tokenizer: Tokenizer adapter, loaded from config when omitted
            model_manager: Model manager, built from config when omitted
        """
        self.config = config
        self.token = token or CancellationToken()
        self.tokenizer = tokenizer or WordPieceTokenizer.from_config(config)
        self.model_manager = model_manager or ModelManager(config, self.token)
        self.max_answer_tokens = config.get_nested('ANSWER.MAX_ANSWER_TOKENS')
        self.input_names = config.get_nested('MODEL.INPUT_NAMES', {})
        self._session: Optional[ModelSession] = None
        self._session_lock = threading.Lock()
        self.model_manager.start()

    @property
    def state(self) -> AcquisitionState:
        return self.model_manager.state

    @staticmethod
    def build_sentence(text: str, question: str) -> str:
        """Wrap question and context in the single JSON-like sentence fed to the tokenizer.

        The raw text goes in unescaped: line breaks and quotes reach the tokenizer as written.
        """
        return f'{{"question": "{question}", "context": "{text}"}}'

    def _validate_request(self, text: str, question: str) -> None:
        if not question or not isinstance(question, str) or not question.strip():
            raise ValidationError("Question must be a non-empty string")
        if not text or not isinstance(text, str) or not text.strip():
            raise ValidationError("Context must be a non-empty string")

    def _raise_if_cancelled(self, token: Optional[CancellationToken], where: str) -> None:
        self.token.raise_if_cancelled(where)
        if token is not None:
            token.raise_if_cancelled(where)

    def _prepare(self, text: str, question: str) -> Tuple[List[Token], Tuple[np.ndarray, np.ndarray, np.ndarray]]:
        """Tokenize and build the three [1, N] input tensors."""
        sentence = self.build_sentence(text, question)
        tokens = self.tokenizer.tokenize(sentence)
        batch = EncodedBatch.from_encoding(self.tokenizer.encode(len(tokens), sentence))
        return tokens, batch.to_tensors()

    def _get_session(self, handle: Any) -> ModelSession:
        with self._session_lock:
            if self._session is None:
                self._session = ModelSession(handle, self.input_names)
            return self._session

    async def answer(self, text: str, question: str, token: Optional[CancellationToken] = None) -> Answer:
        """Answer a question and return the text together with its token span.

        Args:
            text: Context passage
            question: Question about the passage
            token: Optional per-request cancellation token, checked with the engine token

        Raises:
            ValidationError: If the question or context is empty
            QACancelledError: If cancellation is requested before the model runs
            ModelLoadError: If the model could not be acquired
            InferenceError: If the engine fails
        """
        self._validate_request(text, question)
        loop = asyncio.get_running_loop()

        tokens, (input_ids, attention_mask, token_type_ids) = await loop.run_in_executor(
            None, self._prepare, text, question
        )
        logger.debug(f"Question tokenized into {len(tokens)} tokens")

        self._raise_if_cancelled(token, "before waiting for the model")
        handle = await self.model_manager.wait()
        self._raise_if_cancelled(token, "after waiting for the model")

        session = self._get_session(handle)
        start_logits, end_logits = await loop.run_in_executor(
            None, session.run, input_ids, attention_mask, token_type_ids
        )

        span, answer_text = extract_answer(start_logits, end_logits, tokens, self.tokenizer, self.max_answer_tokens)
        if span.is_empty:
            logger.info(f"No answer span found (start={span.start}, end={span.end}) for question: {question!r}")
        else:
            logger.info(f"Answer tokens [{span.start}, {span.end}] score={span.score:.3f}: {answer_text!r}")
        return Answer(text=answer_text, span=span)

    async def answer_one_question(self, text: str, question: str, token: Optional[CancellationToken] = None) -> str:
        """Answer a question about ``text``. Returns '' when the model finds no valid span."""
        result = await self.answer(text, question, token)
        return result.text
