"""
Content - template tables and the factories that turn them into instances.
"""

from .library import ContentLibrary, UnknownTemplate
from .default import DEFAULT_CONTENT
