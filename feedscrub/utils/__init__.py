"""
Utils package for feedscrub.
Contains URL and logging helpers shared by the sanitizer.
"""

from .logs import setup_logging
from .urls import absolute_url, url_domain

__all__ = [
    'absolute_url',
    'setup_logging',
    'url_domain',
]
