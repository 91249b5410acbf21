"""
Post jobs.
"""

from typing import List, Optional

from imageboard.jobs.arguments import ArgumentSet, Disjunction, JobArgs, Requirement
from imageboard.jobs.base import Job, JobContext
from imageboard.kernel.audit import AuditEntry, repr_post, repr_user
from imageboard.kernel.errors import NotFoundError, ServiceUnavailableError, ValidationError
from imageboard.kernel.models.post import Post
from imageboard.kernel.permissions import Privilege, PrivilegeRequirement
from imageboard.schemas.posts import ReverseSearchResponse
from imageboard.search.reverse_search import paginate


class ReverseSearchPostsJob(Job):
    """
    Find posts that look like an image.

    The image is an existing post, a URL or uploaded bytes. The lookup
    itself is delegated to the similarity service; this job only pages
    through its similar matches with ``offset``/``limit``.
    """

    job_type = "reverse-search-posts"
    response_model = ReverseSearchResponse

    def required_arguments(self) -> Requirement:
        return Disjunction(JobArgs.POST_ID, JobArgs.POST_CONTENT_URL, JobArgs.POST_CONTENT)

    def required_main_privilege(self) -> Optional[PrivilegeRequirement]:
        return PrivilegeRequirement(Privilege.REVERSE_SEARCH_POSTS)

    def required_sub_privileges(self, arguments: ArgumentSet) -> List[PrivilegeRequirement]:
        return []

    def authentication_required(self) -> bool:
        return False

    def confirmed_email_required(self) -> bool:
        return False

    async def execute(self, context: JobContext) -> ReverseSearchResponse:
        if context.reverse_search is None:
            raise ServiceUnavailableError("Reverse search is not configured")

        arguments = context.arguments
        offset = arguments.get_int(JobArgs.OFFSET, 0)
        limit = arguments.get_int(JobArgs.LIMIT, context.settings.reverse_search_page_size)
        if offset < 0 or limit < 1:
            raise ValidationError("offset must be >= 0 and limit >= 1")

        post_id = arguments.get_int(JobArgs.POST_ID)
        if post_id is not None:
            post = await context.session.get(Post, post_id)
            if post is None or not post.content_url:
                raise NotFoundError(f"Post {repr_post(post_id)} not found")
            image = post.content_url
        elif arguments.has(JobArgs.POST_CONTENT_URL):
            image = arguments.get_str(JobArgs.POST_CONTENT_URL)
        else:
            image = arguments[JobArgs.POST_CONTENT]

        result = await context.reverse_search.lookup(image)
        if post_id is not None:
            result = result.without_post(post_id)

        return ReverseSearchResponse(
            exact_match=result.exact_match,
            similar=paginate(result.similar_matches, offset, limit),
        )

    def audit_entry(self, context: JobContext, result: ReverseSearchResponse) -> AuditEntry:
        post_id = context.arguments.get_int(JobArgs.POST_ID)
        if post_id is not None:
            subject = repr_post(post_id)
        elif context.arguments.has(JobArgs.POST_CONTENT_URL):
            subject = context.arguments.get_str(JobArgs.POST_CONTENT_URL)
        else:
            subject = "an uploaded file"
        return AuditEntry(
            "{user} reverse searched {subject}",
            {"user": repr_user(context.auth.user), "subject": subject},
        )
