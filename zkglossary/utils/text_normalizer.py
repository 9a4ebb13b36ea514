"""
Cached normalization of term identifiers and reference lists.

``normalize`` cleans text taken from a source file (headings, ``See also``
items). ``norm_key`` builds the looser key used by ``TermStore.find``:
case, spacing and hyphenation differences do not matter there, so
"zk-SNARK", "zk SNARK" and "ZK_snark" share one key.
"""
import unicodedata
import re
from functools import lru_cache
from typing import Dict


_WHITESPACE = re.compile(r'\s+')
_KEY_SEPARATORS = re.compile(r'[\s\-_]+')


class CachedTextNormalizer:
    """Term-id normalization backed by LRU caches."""

    # Typographic characters folded to ASCII
    CHAR_MAP = {
        '‐': '-', '‑': '-',  # Hyphen, non-breaking hyphen
        '–': '-', '—': '-',  # En dash, em dash
        '−': '-',                 # Minus sign
        '“': '"', '”': '"',  # Smart quotes
        '‘': "'", '’': "'",  # Smart apostrophes
        ' ': ' ', '​': '',   # Non-breaking space, zero-width space
    }

    @staticmethod
    @lru_cache(maxsize=4096)
    def normalize(text: str) -> str:
        """
        Clean a term id or reference as written in a source.

        Applies NFC, folds typographic punctuation and collapses runs of
        whitespace. Case and hyphenation are kept.
        """
        if not isinstance(text, str):
            raise TypeError(f"Expected str, got {type(text)}")

        text = unicodedata.normalize("NFC", text)
        for old, new in CachedTextNormalizer.CHAR_MAP.items():
            text = text.replace(old, new)

        return _WHITESPACE.sub(' ', text.strip())

    @staticmethod
    @lru_cache(maxsize=4096)
    def norm_key(text: str, case_sensitive: bool) -> str:
        """Loose lookup key: hyphens, underscores and spaces are equivalent."""
        key = _KEY_SEPARATORS.sub(' ', CachedTextNormalizer.normalize(text)).strip()
        return key if case_sensitive else key.casefold()

    @staticmethod
    def get_cache_info() -> Dict[str, int]:
        normalize_info = CachedTextNormalizer.normalize.cache_info()
        norm_key_info = CachedTextNormalizer.norm_key.cache_info()

        return {
            'normalize_hits': normalize_info.hits,
            'normalize_misses': normalize_info.misses,
            'normalize_size': normalize_info.currsize,
            'norm_key_hits': norm_key_info.hits,
            'norm_key_misses': norm_key_info.misses,
            'norm_key_size': norm_key_info.currsize,
        }

    @staticmethod
    def clear_cache():
        CachedTextNormalizer.normalize.cache_clear()
        CachedTextNormalizer.norm_key.cache_clear()


def normalize(text: str) -> str:
    return CachedTextNormalizer.normalize(text)


def norm_key(text: str, case_sensitive: bool = False) -> str:
    return CachedTextNormalizer.norm_key(text, case_sensitive)
