"""
SecretHunter - Fast hard-coded credential scanner for source trees

Detects leaked API keys and tokens with:
- Compiled regex signatures for 20 services
- Entropy and context heuristics to cut false positives
- Git diff-only mode for CI pipelines
- Lightweight live verification of high-risk secrets

Copyright (c) 2026 SecretHunter Contributors
Licensed under the Apache License 2.0
"""

__version__ = "1.0.0"
__author__ = "SecretHunter Team"


__all__ = [
    "__version__",
]
