"""
Tag maintenance.
"""

from imageboard.kernel.tags.tag_service import TagService

__all__ = ["TagService"]
