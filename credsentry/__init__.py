"""
CredSentry - Hard-coded credential detector for source trees

A static-analysis scanner for security reviews and CI pipelines that flags:
- Suspiciously named variables, fields, properties and attributes
- Connection strings, tokens and API keys recognised by their shape
- Private keys and certificates checked into the tree
- Credentials left behind in comments

Copyright (c) 2026 CredSentry Contributors
Licensed under the Apache License 2.0
"""

__version__ = "1.0.0"
__author__ = "chiakiichan"


__all__ = [
    "__version__",
]
