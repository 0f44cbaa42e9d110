"""
@file: session.py
Inference session wrapper around a loaded ONNX model.

ModelSession owns the single model handle and serializes every run against it,
since the engine does not guarantee safe concurrent execution on one session.
"""
import logging
import threading
from typing import Any, Dict, Tuple

import numpy as np
import onnxruntime as ort

from bert_qa.exceptions import InferenceError

logger = logging.getLogger(__name__)

DEFAULT_INPUT_NAMES = {
    'INPUT_IDS': 'input_ids',
    'ATTENTION_MASK': 'input_mask',
    'TOKEN_TYPE_IDS': 'segment_ids',
}

def load_onnx_session(path: str) -> ort.InferenceSession:
    """Load an ONNX model from ``path`` on the CPU provider. Fails if the file is missing or invalid."""
    logger.info(f"Loading ONNX model from {path}")
    return ort.InferenceSession(str(path), providers=["CPUExecutionProvider"])

class ModelSession:
    """
    Serialized access to one loaded model.

    Args:
        handle: Loaded engine session exposing ``run(output_names, feeds)``.
        input_names: Mapping with INPUT_IDS, ATTENTION_MASK and TOKEN_TYPE_IDS keys
            naming the model inputs. Defaults to input_ids / input_mask / segment_ids.
    """
    def __init__(self, handle: Any, input_names: Dict[str, str] = None):
        self.handle = handle
        self.input_names = {**DEFAULT_INPUT_NAMES, **(input_names or {})}
        self._lock = threading.Lock()

    def run(self, input_ids: np.ndarray, attention_mask: np.ndarray, token_type_ids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Run the model and return (start_logits, end_logits) as 1-D float arrays.

        The first model output is the start logits, the last one the end logits.

        Raises:
            InferenceError: If the engine fails or returns fewer than two outputs.
        """
        feeds = {
            self.input_names['INPUT_IDS']: input_ids,
            self.input_names['ATTENTION_MASK']: attention_mask,
            self.input_names['TOKEN_TYPE_IDS']: token_type_ids,
        }
        with self._lock:
            logger.debug(f"Running inference on {input_ids.shape[-1]} tokens")
            try:
                outputs = self.handle.run(None, feeds)
            except Exception as e:
                logger.error(f"Inference failed: {e}")
                raise InferenceError(f"Inference failed: {e}") from e
        if len(outputs) < 2:
            raise InferenceError(f"Expected start and end logits, model returned {len(outputs)} output(s)")
        start_logits = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
        end_logits = np.asarray(outputs[-1], dtype=np.float32).reshape(-1)
        return start_logits, end_logits
