"""
Tensor construction for BERT model inputs.

The model expects three int64 tensors of shape [1, N] (batch size 1, N tokens):
input ids, attention mask and token type ids.
"""
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from bert_qa.exceptions import ValidationError

def convert_to_tensor(values: Sequence[int], dimension: int) -> np.ndarray:
    """
    Build a [1, dimension] int64 tensor whose single row equals ``values``.

    Args:
        values: Integer sequence of length ``dimension``.
        dimension: Number of tokens in the request.

    Raises:
        ValidationError: If the sequence length does not match ``dimension``.
    """
    if len(values) != dimension:
        raise ValidationError(f"Expected {dimension} values, got {len(values)}")
    tensor = np.zeros((1, dimension), dtype=np.int64)
    tensor[0, :] = values
    return tensor

@dataclass
class EncodedBatch:
    """Input ids, attention mask and token type ids for one question."""
    input_ids: List[int]
    attention_mask: List[int]
    token_type_ids: List[int]

    @classmethod
    def from_encoding(cls, encoded: Iterable[Tuple[int, int, int]]) -> "EncodedBatch":
        triples = list(encoded)
        return cls(
            input_ids=[t[0] for t in triples],
            attention_mask=[t[1] for t in triples],
            token_type_ids=[t[2] for t in triples],
        )

    def __len__(self) -> int:
        return len(self.input_ids)

    def to_tensors(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (input_ids, attention_mask, token_type_ids) tensors, all sized to the input ids."""
        dimension = len(self.input_ids)
        return (
            convert_to_tensor(self.input_ids, dimension),
            convert_to_tensor(self.attention_mask, dimension),
            convert_to_tensor(self.token_type_ids, dimension),
        )
