# src/openrepo/utils/tokenizer.py
import logging

import tiktoken

from openrepo.config import TOKEN_ENCODING

logger = logging.getLogger(__name__)


class Tokenizer:
    _encoding = None
    _unavailable = False

    @classmethod
    def get_encoding(cls):
        if cls._encoding is None:
            try:
                cls._encoding = tiktoken.get_encoding(TOKEN_ENCODING)
            except Exception:
                # Fallback
                cls._encoding = tiktoken.get_encoding("p50k_base")
        return cls._encoding

    @staticmethod
    def count(text: str) -> int:
        """Counts tokens for a given text. An empty string is always 0."""
        if not text:
            return 0
        if not Tokenizer._unavailable:
            try:
                return len(Tokenizer.get_encoding().encode(text, disallowed_special=()))
            except Exception as e:
                # Encoding files are fetched on first use and may be unreachable.
                logger.warning("Token encoding unavailable, falling back to estimates: %s", e)
                Tokenizer._unavailable = True
        return (len(text) + 3) // 4
