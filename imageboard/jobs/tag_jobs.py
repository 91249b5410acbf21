"""
Tag jobs.
"""

from typing import List, Optional

from imageboard.jobs.arguments import ArgumentSet, Conjunction, JobArgs, Requirement
from imageboard.jobs.base import Job, JobContext
from imageboard.kernel.audit import AuditEntry, repr_tag, repr_user
from imageboard.kernel.errors import NotFoundError
from imageboard.kernel.models.base import fold_name
from imageboard.kernel.permissions import Privilege, PrivilegeRequirement
from imageboard.kernel.tags import TagService
from imageboard.logging_config import get_logger
from imageboard.schemas.tags import TagResponse

logger = get_logger(__name__)


class MergeTagsJob(Job):
    """Fold the source tag into the target tag."""

    job_type = "merge-tags"
    response_model = TagResponse

    def required_arguments(self) -> Requirement:
        return Conjunction(JobArgs.SOURCE_TAG_NAME, JobArgs.TARGET_TAG_NAME)

    def required_main_privilege(self) -> Optional[PrivilegeRequirement]:
        return PrivilegeRequirement(Privilege.MERGE_TAGS)

    def required_sub_privileges(self, arguments: ArgumentSet) -> List[PrivilegeRequirement]:
        return []

    def authentication_required(self) -> bool:
        return False

    def confirmed_email_required(self) -> bool:
        return False

    async def execute(self, context: JobContext) -> TagResponse:
        tags = TagService(context.session)
        source_name = context.arguments.get_str(JobArgs.SOURCE_TAG_NAME).strip()
        target_name = context.arguments.get_str(JobArgs.TARGET_TAG_NAME).strip()

        found = await tags.get_by_names([source_name, target_name], for_update=True)
        source = found.get(fold_name(source_name))
        target = found.get(fold_name(target_name))
        if source is None:
            raise NotFoundError(f"Tag {source_name!r} not found")
        if target is None:
            raise NotFoundError(f"Tag {target_name!r} not found")

        if source.id != target.id:
            await tags.remove_unused(exclude=(source.id, target.id))
            await tags.merge(source, target)
            logger.info("Tags merged", extra={"source": source_name, "target": target.name})

        return TagResponse(
            name=target.name,
            category=target.category,
            aliases=await tags.aliases(target),
            usage_count=await tags.usage_count(target),
        )

    def audit_entry(self, context: JobContext, result: TagResponse) -> AuditEntry:
        return AuditEntry(
            "{user} merged {source} with {target}",
            {
                "user": repr_user(context.auth.user),
                "source": repr_tag(context.arguments.get_str(JobArgs.SOURCE_TAG_NAME).strip()),
                "target": repr_tag(result.name),
            },
        )
