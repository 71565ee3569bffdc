# tests/services/test_blog_service.py
"""Tests for BlogService orchestration and image reconciliation."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from app.errors import DuplicateEntryError, NotFoundError, StorageError, UploadError, ValidationError
from app.repositories import BlogFilters
from app.schemas.blog import BlogPayload
from app.schemas.media import BulkDeleteResult, HostedImage
from app.services.blog import REQUIRED_FIELDS_MESSAGE, BlogService, ImageReconciliation
from app.services.media import MediaService

COVER = "https://res.cloudinary.com/demo/image/upload/v1/blog-images/cover.jpg"


def hosted(public_id: str) -> dict[str, str]:
    return {"publicId": public_id, "url": f"https://res.cloudinary.com/demo/image/upload/{public_id}.jpg"}


def foldered(name: str) -> dict[str, str]:
    """Stored image shaped the way the media store returns it, folder included in the id."""
    return {
        "publicId": f"blog-images/blog_1_{name}",
        "url": f"https://res.cloudinary.com/demo/image/upload/v1712/blog-images/blog_1_{name}.jpg",
    }


def ref(public_id: str) -> HostedImage:
    return HostedImage.model_validate(hosted(public_id))


@pytest.fixture
def service(blog_repo, media_service: MediaService) -> BlogService:
    return BlogService(blog_repo, media_service)


class TestImageReconciliation:
    """The plan is pure: it only decides which stored ids to drop."""

    @staticmethod
    def extract(item: object) -> str | None:
        return item.public_id if isinstance(item, HostedImage) else None

    def test_nothing_superseded_without_image_fields(self) -> None:
        plan = ImageReconciliation.plan(
            HostedImage(public_id="x", url=COVER),
            [HostedImage(public_id="y", url=COVER)],
            BlogPayload(fields={"title": "New"}),
            self.extract,
        )
        assert plan.superseded == []
        assert plan.banner is None
        assert plan.images is None

    def test_new_banner_supersedes_old_banner_only(self) -> None:
        plan = ImageReconciliation.plan(
            HostedImage(public_id="x", url=COVER),
            [HostedImage(public_id="y", url=COVER)],
            BlogPayload(banner="https://example.com/new.jpg"),
            self.extract,
        )
        assert plan.superseded == ["x"]

    def test_reused_ids_are_retained(self) -> None:
        plan = ImageReconciliation.plan(
            HostedImage(public_id="x", url=COVER),
            [HostedImage(public_id="y", url=COVER), HostedImage(public_id="z", url=COVER)],
            BlogPayload(
                banner=HostedImage(public_id="y", url=COVER),
                images=[HostedImage(public_id="x", url=COVER)],
            ),
            self.extract,
        )
        assert plan.superseded == ["z"]

    def test_untouched_banner_is_never_superseded(self) -> None:
        plan = ImageReconciliation.plan(
            HostedImage(public_id="x", url=COVER),
            [HostedImage(public_id="x", url=COVER), HostedImage(public_id="y", url=COVER)],
            BlogPayload(images=[]),
            self.extract,
        )
        assert plan.superseded == ["y"]

    def test_bare_url_refs_have_nothing_to_delete(self) -> None:
        plan = ImageReconciliation.plan(
            "https://example.com/old.jpg",
            ["https://example.com/old-gallery.jpg"],
            BlogPayload(banner="https://example.com/new.jpg", images=[]),
            self.extract,
        )
        assert plan.superseded == []


class TestCreate:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [{"body": "text"}, {"title": "Hello"}, {"title": "", "body": "text"}],
    )
    async def test_required_fields(self, service: BlogService, fields: dict) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.create(BlogPayload(fields=fields, banner=COVER))
        assert exc_info.value.detail == REQUIRED_FIELDS_MESSAGE

    @pytest.mark.asyncio
    async def test_banner_required(self, service: BlogService) -> None:
        with pytest.raises(ValidationError, match="Title, banner, and body are required"):
            await service.create(BlogPayload(fields={"title": "Hello", "body": "text"}))

    @pytest.mark.asyncio
    async def test_hosted_banner_causes_no_upload(
        self,
        service: BlogService,
        mock_storage: MagicMock,
    ) -> None:
        blog, summary = await service.create(
            BlogPayload(fields={"title": "Hello World", "body": "Some text"}, banner=COVER),
        )

        assert blog.banner == {"publicId": "cover", "url": COVER}
        assert blog.slug == "hello-world"
        assert summary.success_count == 0
        mock_storage.upload_from_url.assert_not_awaited()
        mock_storage.upload_from_bytes.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_derived_fields(self, service: BlogService) -> None:
        blog, _ = await service.create(
            BlogPayload(
                fields={
                    "title": "  Reading Time  ",
                    "body": " ".join(["word"] * 450),
                    "tags": "Python, FastAPI, python",
                },
                banner=COVER,
            ),
        )

        assert blog.title == "Reading Time"
        assert blog.read_time == 3
        assert blog.tags == ["python", "fastapi"]
        assert blog.visibility == "draft"
        assert blog.author == "Muheet Bharti"

    @pytest.mark.asyncio
    async def test_gallery_failures_are_reported_not_fatal(
        self,
        service: BlogService,
        mock_storage: MagicMock,
    ) -> None:
        mock_storage.upload_from_url.side_effect = StorageError("Image upload failed: 404")

        blog, summary = await service.create(
            BlogPayload(
                fields={"title": "Gallery", "body": "text"},
                banner=COVER,
                images=[ref("a"), "https://example.com/broken.jpg", ref("b")],
            ),
        )

        assert [image["publicId"] for image in blog.images] == ["a", "b"]
        assert summary.success_count == 2
        assert summary.failure_count == 1

    @pytest.mark.asyncio
    async def test_banner_failure_aborts_create(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        mock_storage.upload_from_url.side_effect = StorageError("Image upload failed: 404")

        with pytest.raises(UploadError):
            await service.create(
                BlogPayload(fields={"title": "No Banner", "body": "text"}, banner="https://example.com/x.jpg"),
            )
        assert blog_repo.blogs == {}

    @pytest.mark.asyncio
    async def test_duplicate_slug_rejected_before_upload(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        blog_repo.seed(title="Hello World")

        with pytest.raises(DuplicateEntryError) as exc_info:
            await service.create(
                BlogPayload(
                    fields={"title": "Hello, World!", "body": "text"},
                    banner="https://example.com/x.jpg",
                ),
            )

        assert exc_info.value.status_code == 400
        mock_storage.upload_from_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_visibility_rejected(self, service: BlogService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.create(
                BlogPayload(
                    fields={"title": "Hello", "body": "text", "visibility": "secret"},
                    banner=COVER,
                ),
            )
        assert exc_info.value.errors[0]["field"] == "visibility"


class TestRead:
    @pytest.mark.asyncio
    async def test_list_pagination(self, service: BlogService, blog_repo) -> None:
        start = datetime(2025, 1, 1, tzinfo=UTC)
        for i in range(15):
            blog_repo.seed(title=f"Post {i}", date=start + timedelta(days=i))

        blogs, pagination = await service.list_blogs(BlogFilters(), page=2, limit=10)

        assert len(blogs) == 5
        assert pagination.current == 2
        assert pagination.pages == 2
        assert pagination.total == 15
        assert blogs[0].title == "Post 4"

    @pytest.mark.asyncio
    async def test_list_by_tag_is_public_only(self, service: BlogService, blog_repo) -> None:
        blog_repo.seed(title="Public", tags=["python"], visibility="public")
        blog_repo.seed(title="Draft", tags=["python"], visibility="draft")

        blogs, pagination = await service.list_by_tag("Python")

        assert [blog.title for blog in blogs] == ["Public"]
        assert pagination.total == 1

    @pytest.mark.asyncio
    async def test_get_by_id_or_slug(self, service: BlogService, blog_repo) -> None:
        blog = blog_repo.seed(title="Find Me")

        assert await service.get_blog(str(blog.id)) is blog
        assert await service.get_blog("find-me") is blog

    @pytest.mark.asyncio
    async def test_missing_blog_raises_not_found(self, service: BlogService) -> None:
        with pytest.raises(NotFoundError):
            await service.get_blog(str(uuid4()))
        with pytest.raises(NotFoundError):
            await service.get_by_slug("nothing-here")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_replacing_banner_by_file_deletes_old_id(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
        make_upload,
    ) -> None:
        blog = blog_repo.seed(banner=hosted("old"), images=[hosted("keep")])

        updated, summary = await service.update(
            str(blog.id),
            BlogPayload(banner=make_upload("new.jpg")),
        )

        mock_storage.delete_many.assert_awaited_once_with(["old"])
        assert updated.banner["publicId"] == "blog_1_new"
        assert updated.images == [hosted("keep")]
        assert summary.success_count == 1

    @pytest.mark.asyncio
    async def test_superseded_images_deleted_before_uploads(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
        make_upload,
    ) -> None:
        calls: list[str] = []
        mock_storage.delete_many.side_effect = lambda ids: calls.append("delete") or BulkDeleteResult()
        original_upload = mock_storage.upload_from_bytes.side_effect

        async def tracked_upload(*args, **kwargs):
            calls.append("upload")
            return await original_upload(*args, **kwargs)

        mock_storage.upload_from_bytes.side_effect = tracked_upload
        blog = blog_repo.seed(banner=hosted("b"), images=[hosted("x"), hosted("y")])

        updated, _ = await service.update(
            str(blog.id),
            BlogPayload(images=[ref("y"), make_upload("fresh.jpg")]),
        )

        mock_storage.delete_many.assert_awaited_once_with(["x"])
        assert calls == ["delete", "upload"]
        assert [image["publicId"] for image in updated.images] == ["y", "blog_1_fresh"]
        assert updated.banner == hosted("b")

    @pytest.mark.asyncio
    async def test_failures_do_not_abort_update(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        mock_storage.delete_many.side_effect = StorageError("Image deletion failed: timeout")
        mock_storage.upload_from_url.side_effect = StorageError("Image upload failed: 404")
        blog = blog_repo.seed(title="Old Title", banner=hosted("old"))

        updated, summary = await service.update(
            str(blog.id),
            BlogPayload(fields={"title": "New Title"}, banner="https://example.com/new.jpg"),
        )

        assert updated.title == "New Title"
        assert updated.slug == "new-title"
        assert updated.banner == hosted("old")
        assert updated.updated_at is not None
        assert summary.failure_count == 1
        assert summary.failed[0].filename == "https://example.com/new.jpg"

    @pytest.mark.asyncio
    async def test_kept_urls_retain_folder_prefixed_ids(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        cover, first, second = foldered("cover"), foldered("a"), foldered("b")
        blog = blog_repo.seed(banner=cover, images=[first, second])

        updated, summary = await service.update(
            str(blog.id),
            BlogPayload(images=[first["url"]]),
        )

        mock_storage.delete_many.assert_awaited_once_with(["blog-images/blog_1_b"])
        mock_storage.upload_from_url.assert_not_awaited()
        assert updated.images == [first]
        assert updated.banner == cover
        assert summary.failure_count == 0

    @pytest.mark.asyncio
    async def test_resubmitting_current_urls_deletes_nothing(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        cover, first, second = foldered("cover"), foldered("a"), foldered("b")
        blog = blog_repo.seed(banner=cover, images=[first, second])

        updated, _ = await service.update(
            str(blog.id),
            BlogPayload(banner=cover["url"], images=[first["url"], second["url"]]),
        )

        mock_storage.delete_many.assert_not_awaited()
        assert updated.banner == cover
        assert updated.images == [first, second]

    @pytest.mark.asyncio
    async def test_subtitle_can_be_cleared(self, service: BlogService, blog_repo) -> None:
        blog = blog_repo.seed(subtitle="Old subtitle")

        updated, _ = await service.update(str(blog.id), BlogPayload(fields={"subtitle": None}))

        assert updated.subtitle is None

    @pytest.mark.asyncio
    async def test_body_change_recomputes_read_time(self, service: BlogService, blog_repo) -> None:
        blog = blog_repo.seed(body="short")

        updated, _ = await service.update(
            str(blog.id),
            BlogPayload(fields={"body": " ".join(["word"] * 401)}),
        )

        assert updated.read_time == 3

    @pytest.mark.asyncio
    async def test_title_taken_by_another_blog(self, service: BlogService, blog_repo) -> None:
        blog_repo.seed(title="Taken")
        blog = blog_repo.seed(title="Mine")

        with pytest.raises(DuplicateEntryError):
            await service.update(str(blog.id), BlogPayload(fields={"title": "Taken"}))

    @pytest.mark.asyncio
    async def test_keeping_own_title_is_allowed(self, service: BlogService, blog_repo) -> None:
        blog = blog_repo.seed(title="Mine")

        updated, _ = await service.update(str(blog.id), BlogPayload(fields={"title": "Mine"}))

        assert updated.slug == "mine"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blog_id", ["not-a-uuid", str(uuid4())])
    async def test_unknown_blog(self, service: BlogService, blog_id: str) -> None:
        with pytest.raises(NotFoundError):
            await service.update(blog_id, BlogPayload(fields={"title": "x"}))


class TestDelete:
    @pytest.mark.asyncio
    async def test_one_bulk_delete_then_record_removed(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        blog = blog_repo.seed(banner=hosted("x"), images=[hosted("y"), "https://example.com/z.jpg"])

        await service.delete(str(blog.id))

        mock_storage.delete_many.assert_awaited_once_with(["x", "y"])
        assert blog.id not in blog_repo.blogs

    @pytest.mark.asyncio
    async def test_no_hosted_images_skips_bulk_delete(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        blog = blog_repo.seed(banner="https://example.com/cover.jpg")

        await service.delete(str(blog.id))

        mock_storage.delete_many.assert_not_awaited()
        assert blog_repo.blogs == {}

    @pytest.mark.asyncio
    async def test_record_deleted_even_when_media_store_fails(
        self,
        service: BlogService,
        blog_repo,
        mock_storage: MagicMock,
    ) -> None:
        mock_storage.delete_many.side_effect = StorageError("Image deletion failed: timeout")
        blog = blog_repo.seed(banner=hosted("x"))

        await service.delete(str(blog.id))

        assert blog_repo.blogs == {}

    @pytest.mark.asyncio
    async def test_missing_blog(self, service: BlogService) -> None:
        with pytest.raises(NotFoundError):
            await service.delete(str(uuid4()))
