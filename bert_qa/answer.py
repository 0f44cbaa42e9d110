"""
@file: answer.py
Answer span extraction from start/end logits.

Policy:
- start = argmax(start_logits), end = argmax(end_logits); ties go to the lowest index.
- If end < start the span is empty and the answer is the empty string.
- If max_answer_tokens is set, end is clamped to start + max_answer_tokens - 1.
- Indices are bounded by the number of tokens.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from bert_qa.tokenizer import Token

@dataclass(frozen=True)
class AnswerSpan:
    """Inclusive (start, end) token indices of an answer, plus its logit score."""
    start: int
    end: int
    score: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    def __len__(self) -> int:
        return 0 if self.is_empty else self.end - self.start + 1

@dataclass(frozen=True)
class Answer:
    """Extracted answer text and the span it came from."""
    text: str
    span: AnswerSpan

def find_answer_span(start_logits: Sequence[float], end_logits: Sequence[float], max_answer_tokens: Optional[int] = None) -> AnswerSpan:
    """
    Pick the answer span from start/end logits.

    Args:
        start_logits: Per-token start scores.
        end_logits: Per-token end scores, same length as start_logits.
        max_answer_tokens: Optional upper bound on the span length.

    Returns:
        AnswerSpan: Possibly empty (end < start) span.
    """
    start_logits = np.asarray(start_logits, dtype=np.float64).reshape(-1)
    end_logits = np.asarray(end_logits, dtype=np.float64).reshape(-1)
    if start_logits.size == 0 or end_logits.size == 0:
        return AnswerSpan(start=0, end=-1)

    start = int(np.argmax(start_logits))
    end = int(np.argmax(end_logits))
    if end < start:
        return AnswerSpan(start=start, end=end)
    if max_answer_tokens is not None and max_answer_tokens > 0:
        end = min(end, start + max_answer_tokens - 1)
    score = float(start_logits[start] + end_logits[end])
    return AnswerSpan(start=start, end=end, score=score)

def extract_answer(
    start_logits: Sequence[float],
    end_logits: Sequence[float],
    tokens: Sequence[Token],
    tokenizer,
    max_answer_tokens: Optional[int] = None,
) -> Tuple[AnswerSpan, str]:
    """
    Turn logits into an answer string.

    Each token in the span is mapped back to vocabulary text with
    ``tokenizer.id_to_token``, merged with ``tokenizer.untokenize`` and joined
    with single spaces.

    Returns:
        (AnswerSpan, str): The span and the answer text ('' for an empty span).
    """
    count = min(len(tokens), len(start_logits), len(end_logits))
    span = find_answer_span(start_logits[:count], end_logits[:count], max_answer_tokens)
    if span.is_empty:
        return span, ""
    predicted = [tokenizer.id_to_token(token.id) for token in tokens[span.start:span.end + 1]]
    return span, " ".join(tokenizer.untokenize(predicted))
