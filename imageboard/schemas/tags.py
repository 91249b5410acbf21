"""
Tag schemas.
"""

from typing import List

from pydantic import BaseModel


class TagResponse(BaseModel):
    name: str
    category: str
    aliases: List[str] = []
    usage_count: int = 0
