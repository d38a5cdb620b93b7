"""
feedscrub package.
Sanitizes HTML fragments from feed articles before they are rendered.
"""

from loguru import logger

from .sanitizer import sanitize
from .tokenizer import TokenizerError

# Library code stays quiet until the embedding application opts in
logger.disable("feedscrub")

__all__ = [
    'sanitize',
    'TokenizerError',
]
