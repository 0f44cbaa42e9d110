"""
Custom exception hierarchy for the BERT QA system.

This module defines all custom exceptions used throughout the package, organized by logical error domains:

- BertQAError: Base for all package-level errors
- ValidationError: For input or data validation failures
- ConfigurationError: For configuration issues
- TokenizerError: For tokenizer loading failures
- QACancelledError: When cancellation was requested for acquisition or a question

Model lifecycle errors inherit from ModelError:
- ModelError: Base for model acquisition and inference errors
- DownloadError: For download failures that are not retried
- ModelLoadError: When the engine cannot load the artifact even after a fresh download
- InferenceError: When the engine fails while running a question
"""

class BertQAError(Exception):
    """Base exception for all BERT QA errors."""
    pass

class ValidationError(BertQAError):
    """Raised when input or data validation fails anywhere in the system."""
    pass

class ConfigurationError(BertQAError):
    """Raised when configuration is invalid or missing."""
    pass

class TokenizerError(BertQAError):
    """Raised when the tokenizer cannot be loaded."""
    pass

class QACancelledError(BertQAError):
    """Raised when a cancellation request is observed at a checkpoint.

    Terminal for the whole request or acquisition; never retried.
    """
    pass

class ModelError(BertQAError):
    """Base exception for model acquisition and inference."""
    pass

class DownloadError(ModelError):
    """Raised when the model download fails in a way that is not retried.

    Attributes:
        url (str, optional): The source URL of the failed download.
    """
    def __init__(self, message, url=None):
        super().__init__(message)
        self.url = url

class ModelLoadError(ModelError):
    """Raised when the engine cannot load the model artifact.

    Attributes:
        path (str, optional): The local artifact path that failed to load.
    """
    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path

class InferenceError(ModelError):
    """Raised when the engine fails while running inference."""
    pass
