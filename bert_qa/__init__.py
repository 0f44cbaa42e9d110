"""
BERT QA - extractive question answering over a context passage with an ONNX BERT model.
"""

from bert_qa.cancellation import CancellationToken
from bert_qa.qa_engine import BertQA

__version__ = "0.1.0"
__all__ = ["BertQA", "CancellationToken"]
