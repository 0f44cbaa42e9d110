"""Test configuration and fixtures."""

import threading
import time

import numpy as np
import pytest
from tokenizers import Tokenizer, models, normalizers, pre_tokenizers, processors

from bert_qa.config import Config
from bert_qa.tokenizer import WordPieceTokenizer

VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]", "[MASK]",
    "{", "}", "\"", ":", ",", "?", ".",
    "question", "context",
    "who", "is", "it", "the", "quick", "brown", "fox", "jumps",
    "run", "##s", "hobbit", "hole",
]
VOCAB_IDS = {token: i for i, token in enumerate(VOCAB)}

CONTEXT = "The quick brown fox jumps."
QUESTION = "Who is it?"


def build_wordpiece_tokenizer() -> Tokenizer:
    """Small uncased BERT-style WordPiece tokenizer with a fixed vocabulary."""
    tokenizer = Tokenizer(models.WordPiece(vocab=dict(VOCAB_IDS), unk_token="[UNK]"))
    tokenizer.normalizer = normalizers.Sequence([
        normalizers.NFD(),
        normalizers.Lowercase(),
        normalizers.StripAccents(),
    ])
    tokenizer.pre_tokenizer = pre_tokenizers.BertPreTokenizer()
    tokenizer.post_processor = processors.TemplateProcessing(
        single="[CLS]:0 $A:0 [SEP]:0",
        pair="[CLS]:0 $A:0 [SEP]:0 $B:1 [SEP]:1",
        special_tokens=[("[CLS]", VOCAB_IDS["[CLS]"]), ("[SEP]", VOCAB_IDS["[SEP]"])],
    )
    return tokenizer


class FakeHandle:
    """
    Stand-in for an onnxruntime session.

    Start logits peak at the first occurrence of ``start_token`` in input_ids and
    end logits at the last occurrence of ``end_token``. Records feeds and the
    maximum number of overlapping runs.
    """
    def __init__(self, start_token="quick", end_token="fox", delay=0.0, error=None):
        self.start_id = VOCAB_IDS[start_token]
        self.end_id = VOCAB_IDS[end_token]
        self.delay = delay
        self.error = error
        self.feeds = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def run(self, output_names, feeds):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.feeds.append(feeds)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            input_ids = next(iter(feeds.values()))[0]
            start = np.zeros((1, len(input_ids)), dtype=np.float32)
            end = np.zeros((1, len(input_ids)), dtype=np.float32)
            start_positions = np.flatnonzero(input_ids == self.start_id)
            end_positions = np.flatnonzero(input_ids == self.end_id)
            if start_positions.size:
                start[0, start_positions[0]] = 10.0
            if end_positions.size:
                end[0, end_positions[-1]] = 10.0
            return [start, end]
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def wordpiece_tokenizer():
    """Tokenizer adapter over the small test vocabulary."""
    return WordPieceTokenizer(build_wordpiece_tokenizer())


@pytest.fixture
def model_config(tmp_path):
    """Config pointing the model artifact into a temporary directory."""
    return Config({
        'MODEL': {
            'URL': 'https://models.example.com/bert.onnx',
            'PATH': str(tmp_path / 'bert.onnx'),
        },
        'DOWNLOAD': {
            'RETRY_DELAY': 5,
        },
    })


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file."""
    log_file = tmp_path / "test.log"
    yield str(log_file)
    if log_file.exists():
        log_file.unlink()
