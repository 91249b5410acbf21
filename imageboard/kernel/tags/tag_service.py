"""
Tag model operations: lookup, usage counting, garbage collection, merging.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from imageboard.kernel.models.base import fold_name
from imageboard.kernel.models.post import post_tags
from imageboard.kernel.models.tag import Tag, TagAlias
from imageboard.logging_config import get_logger

logger = get_logger(__name__)


class TagService:
    """
    Operations on tags within the caller's transaction.

    Usage count is always derived from ``post_tags``; nothing here stores it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_name(self, name: str, for_update: bool = False) -> Optional[Tag]:
        """Canonical tag by name, ignoring case. Aliases are not followed."""
        query = select(Tag).where(Tag.name_lower == fold_name(name))
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_names(self, names: Iterable[str], for_update: bool = False) -> Dict[str, Tag]:
        """
        Canonical tags keyed by folded name (see fold_name).

        Rows are locked in ID order so concurrent callers locking the same
        pair cannot deadlock.
        """
        folded = sorted({fold_name(n) for n in names})
        query = select(Tag).where(Tag.name_lower.in_(folded)).order_by(Tag.id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return {tag.name_lower: tag for tag in result.scalars().all()}

    async def usage_count(self, tag: Tag) -> int:
        query = select(func.count()).select_from(post_tags).where(post_tags.c.tag_id == tag.id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def aliases(self, tag: Tag) -> List[str]:
        query = select(TagAlias.name).where(TagAlias.tag_id == tag.id).order_by(TagAlias.name)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def post_ids(self, tag: Tag) -> List[int]:
        query = (
            select(post_tags.c.post_id)
            .where(post_tags.c.tag_id == tag.id)
            .order_by(post_tags.c.post_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def remove_unused(self, exclude: Iterable[int] = ()) -> int:
        """
        Delete tags no post carries. Their aliases go with them.

        Args:
            exclude: Tag IDs to keep even if unused

        Returns:
            Number of tags removed
        """
        used = select(post_tags.c.tag_id).distinct()
        query = select(Tag.id).where(Tag.id.not_in(used))
        excluded = list(exclude)
        if excluded:
            query = query.where(Tag.id.not_in(excluded))
        result = await self.session.execute(query)
        unused_ids = list(result.scalars().all())
        if not unused_ids:
            return 0

        await self.session.execute(delete(TagAlias).where(TagAlias.tag_id.in_(unused_ids)))
        await self.session.execute(
            delete(Tag).where(Tag.id.in_(unused_ids)).execution_options(synchronize_session=False)
        )
        logger.info("Removed unused tags", extra={"count": len(unused_ids)})
        return len(unused_ids)

    async def merge(self, source: Tag, target: Tag) -> Tag:
        """
        Fold ``source`` into ``target``.

        Posts tagged with source become tagged with target (posts that already
        carry both keep a single association), source's aliases move to
        target, source's own name becomes a target alias, and source is
        deleted. Merging a tag into itself changes nothing.
        """
        if source.id == target.id:
            return target

        already_on_target = select(post_tags.c.post_id).where(post_tags.c.tag_id == target.id)
        await self.session.execute(
            update(post_tags)
            .where(post_tags.c.tag_id == source.id)
            .where(post_tags.c.post_id.not_in(already_on_target))
            .values(tag_id=target.id)
        )
        # Whatever is left points at posts that already have target
        await self.session.execute(delete(post_tags).where(post_tags.c.tag_id == source.id))

        await self.session.execute(
            update(TagAlias)
            .where(TagAlias.tag_id == source.id)
            .values(tag_id=target.id)
            .execution_options(synchronize_session=False)
        )

        source_name = source.name
        await self.session.delete(source)
        await self.session.flush()

        self.session.add(TagAlias(name=source_name, tag_id=target.id))
        await self.session.flush()
        return target
