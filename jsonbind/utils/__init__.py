# Imports for convenience
from . import format, path

__all__ = [
    'format',
    'path',
]
