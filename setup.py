from setuptools import setup, find_packages

setup(
    name="bert_qa",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",  # For config file parsing
        "python-dotenv",  # For .env loading before ${VAR} substitution
        "httpx",  # For streaming the model download
        "tenacity",  # For download retries
        "numpy",  # For input tensors and logits
        "onnxruntime",  # For running the BERT model
        "tokenizers",  # For WordPiece tokenization
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    python_requires=">=3.11",
)
