"""
openrepo - pick files from a repository and pack them into one LLM prompt.
"""

__version__ = "0.1.0"
