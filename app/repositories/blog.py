"""Blog repository for database operations."""

from dataclasses import dataclass, field
from logging import getLogger
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, desc, func, or_, select, text
from sqlalchemy.dialects.postgresql import JSONB

from app.configs import file_logger
from app.errors import DuplicateEntryError, ValidationError
from app.models.blog import SEARCH_DOCUMENT, BlogDB, utcnow
from app.repositories.base import BaseRepository
from app.schemas.blog import BlogCreate, BlogUpdate, Visibility
from app.schemas.media import dump_image_ref
from app.utils.helpers import calculate_read_time, slugify

logger = file_logger(getLogger(__name__))

SEARCH_PREDICATE = (
    f"to_tsvector('english', {SEARCH_DOCUMENT}) @@ plainto_tsquery('english', :search)"
)

# Nullable columns a patch may reset to NULL
CLEARABLE_FIELDS = frozenset({"subtitle"})


@dataclass(frozen=True)
class BlogFilters:
    """
    Filters for listing blogs.

    Attributes:
        visibility: Exact visibility match.
        tags: Matches blogs carrying at least one of these tags.
        search: Full-text query over title, subtitle and body.
    """

    visibility: Visibility | None = None
    tags: list[str] = field(default_factory=list)
    search: str | None = None


def derive_slug(title: str) -> str:
    """
    Slug for a title.

    Raises:
        ValidationError: If the title has no letters or digits.
    """
    slug = slugify(title)
    if not slug:
        raise ValidationError("Title must contain at least one letter or number")
    return slug


class BlogRepository(BaseRepository[BlogDB, BlogCreate, BlogUpdate]):
    """
    Repository for Blog database operations.

    Derived fields are computed here, right before persisting: ``slug``
    from ``title`` and ``read_time`` from ``body``.
    """

    model = BlogDB

    def _conditions(self, filters: BlogFilters) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        if filters.visibility:
            # pyrefly: ignore [bad-argument-type]
            conditions.append(BlogDB.visibility == filters.visibility)
        if filters.tags:
            # pyrefly: ignore [missing-attribute]
            tag_conditions = [func.jsonb_exists(BlogDB.tags.cast(JSONB), tag) for tag in filters.tags]
            conditions.append(or_(*tag_conditions))
        if filters.search:
            conditions.append(text(SEARCH_PREDICATE).bindparams(search=filters.search))
        return conditions

    async def find(
        self,
        filters: BlogFilters,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[BlogDB], int]:
        """
        List blogs matching the filters, newest first.

        Args:
            filters: Visibility, tag and search filters
            page: 1-based page number
            limit: Page size

        Returns:
            tuple[list[BlogDB], int]: The page of blogs and the total match count
        """
        conditions = self._conditions(filters)

        query = (
            select(BlogDB)
            .where(*conditions)
            # pyrefly: ignore [bad-argument-type]
            .order_by(desc(BlogDB.date))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(query)
        blogs = list(result.scalars().all())

        count_query = select(func.count()).select_from(BlogDB).where(*conditions)
        total = (await self.session.execute(count_query)).scalar() or 0

        logger.info(f"Found {total} blogs for {filters}, returning page {page}")
        return blogs, total

    async def get_by_slug(self, slug: str) -> BlogDB | None:
        """
        Get blog by slug.

        Args:
            slug: Blog slug

        Returns:
            BlogDB | None: Blog if found, None otherwise
        """
        return await self.get_by_field("slug", slug)

    async def find_one(self, id_or_slug: str) -> BlogDB | None:
        """
        Look a blog up by primary key, falling back to its slug.

        Args:
            id_or_slug: A UUID string or a slug

        Returns:
            BlogDB | None: Blog if found, None otherwise
        """
        try:
            blog_id = UUID(id_or_slug)
        except ValueError:
            pass
        else:
            if blog := await self.get_by_id(blog_id):
                return blog
        return await self.get_by_slug(id_or_slug)

    async def ensure_slug_available(self, slug: str, exclude_id: UUID | None = None) -> None:
        if await self._check_exists_by_field("slug", slug, exclude_id=exclude_id):
            raise DuplicateEntryError(detail=f"A blog with slug '{slug}' already exists")

    async def insert(self, draft: BlogCreate) -> BlogDB:
        """
        Create a new blog post.

        Args:
            draft: Validated blog with resolved banner and images

        Returns:
            BlogDB: Created blog database model

        Raises:
            ValidationError: If no slug can be derived from the title
            DuplicateEntryError: If the slug already exists
        """
        slug = derive_slug(draft.title)
        await self.ensure_slug_available(slug)

        db_blog = BlogDB(
            title=draft.title,
            subtitle=draft.subtitle,
            body=draft.body,
            slug=slug,
            read_time=calculate_read_time(draft.body),
            tags=draft.tags,
            visibility=draft.visibility,
            banner=dump_image_ref(draft.banner),
            images=[dump_image_ref(image) for image in draft.images],
            date=draft.date or utcnow(),
        )
        return await self._add_and_refresh(db_blog)

    async def update(self, blog_id: UUID, patch: BlogUpdate) -> BlogDB | None:
        """
        Merge a patch into an existing blog.

        Args:
            blog_id: Blog UUID
            patch: Fields to change; unset fields are left untouched.
                An explicit None clears a field in ``CLEARABLE_FIELDS`` and is
                ignored for every other field

        Returns:
            BlogDB | None: Updated blog if found, None otherwise

        Raises:
            ValidationError: If the new title yields no slug
            DuplicateEntryError: If the new slug belongs to another blog
        """
        db_blog = await self.get_by_id(blog_id)
        if not db_blog:
            return None

        update_data: dict[str, Any] = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True, exclude={"banner", "images"}).items()
            if value is not None or key in CLEARABLE_FIELDS
        }

        if "title" in update_data:
            update_data["slug"] = derive_slug(update_data["title"])
            await self.ensure_slug_available(update_data["slug"], exclude_id=blog_id)
        if "body" in update_data:
            update_data["read_time"] = calculate_read_time(update_data["body"])
        if patch.banner is not None:
            update_data["banner"] = dump_image_ref(patch.banner)
        if patch.images is not None:
            update_data["images"] = [dump_image_ref(image) for image in patch.images]

        update_data["updated_at"] = utcnow()

        for key, value in update_data.items():
            setattr(db_blog, key, value)

        return await self._add_and_refresh(db_blog)
