"""
@file: tokenizer.py
Tokenizer adapter for the BERT QA pipeline.

Wraps a HuggingFace ``tokenizers.Tokenizer`` (WordPiece, uncased) behind the
four operations the pipeline consumes:

- tokenize(text) -> ordered list of Token(text, id), special tokens included
- encode(count, text) -> ordered list of (input_id, attention_mask, token_type_id)
- id_to_token(id) -> vocabulary text
- untokenize(tokens) -> words, with '##' continuation pieces merged

Example usage:
    tokenizer = WordPieceTokenizer.from_config(config)
    tokens = tokenizer.tokenize('{"question": "Who?", "context": "Bilbo."}')
"""
import logging
from typing import Any, List, NamedTuple, Tuple

from tokenizers import Tokenizer

from bert_qa.exceptions import TokenizerError

logger = logging.getLogger(__name__)

SUBWORD_PREFIX = "##"
UNKNOWN_TOKEN = "[UNK]"
SPECIAL_TOKENS = frozenset({"[CLS]", "[SEP]", "[PAD]", "[MASK]"})

class Token(NamedTuple):
    """A single subword token and its vocabulary index."""
    text: str
    id: int

class WordPieceTokenizer:
    """
    Adapter around a HuggingFace WordPiece tokenizer.

    Args:
        tokenizer: A loaded ``tokenizers.Tokenizer`` whose post-processor adds [CLS]/[SEP].
    """
    def __init__(self, tokenizer: Tokenizer):
        self._tokenizer = tokenizer

    @classmethod
    def from_config(cls, config: Any) -> "WordPieceTokenizer":
        """
        Load the tokenizer described by the TOKENIZER section of the config.

        TOKENIZER.FILE (a tokenizer.json) wins over TOKENIZER.NAME (a hub id).

        Raises:
            TokenizerError: If the tokenizer cannot be loaded.
        """
        tokenizer_file = config.get_nested('TOKENIZER.FILE')
        tokenizer_name = config.get_nested('TOKENIZER.NAME', 'bert-large-uncased-whole-word-masking-finetuned-squad')
        try:
            if tokenizer_file:
                logger.info(f"Loading tokenizer from file {tokenizer_file}")
                return cls(Tokenizer.from_file(str(tokenizer_file)))
            logger.info(f"Loading tokenizer {tokenizer_name} from the HuggingFace hub")
            return cls(Tokenizer.from_pretrained(tokenizer_name))
        except Exception as e:
            raise TokenizerError(f"Failed to load tokenizer ({tokenizer_file or tokenizer_name}): {e}") from e

    def tokenize(self, text: str) -> List[Token]:
        encoding = self._tokenizer.encode(text)
        return [Token(text=t, id=i) for t, i in zip(encoding.tokens, encoding.ids)]

    def encode(self, count: int, text: str) -> List[Tuple[int, int, int]]:
        """
        Encode text into exactly ``count`` (input_id, attention_mask, token_type_id) triples.

        Longer encodings are truncated; shorter ones are padded with zeros.
        """
        encoding = self._tokenizer.encode(text)
        triples = list(zip(encoding.ids, encoding.attention_mask, encoding.type_ids))[:count]
        triples.extend([(0, 0, 0)] * (count - len(triples)))
        return triples

    def id_to_token(self, token_id: int) -> str:
        token = self._tokenizer.id_to_token(int(token_id))
        return token if token is not None else UNKNOWN_TOKEN

    def untokenize(self, tokens: List[str]) -> List[str]:
        """Merge '##' continuation pieces into whole words and drop special tokens."""
        words: List[str] = []
        for token in tokens:
            if token in SPECIAL_TOKENS:
                continue
            if token.startswith(SUBWORD_PREFIX) and words:
                words[-1] += token[len(SUBWORD_PREFIX):]
            else:
                words.append(token)
        return words
