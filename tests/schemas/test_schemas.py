# tests/schemas/test_schemas.py
"""Tests for the blog, media and envelope schemas."""

import pytest
from pydantic import ValidationError

from app.models import BlogDB
from app.schemas.blog import BlogFields, BlogPatch, BlogResponse
from app.schemas.envelope import Pagination, envelope
from app.schemas.media import (
    HostedImage,
    UploadedImage,
    UploadSummary,
    dump_image_ref,
    public_id_of,
    to_image_ref,
)

HOSTED = {"publicId": "blog-images/cover", "url": "https://res.cloudinary.com/demo/image/upload/cover.jpg"}


class TestImageRef:
    def test_string_stays_a_string(self) -> None:
        assert to_image_ref("https://example.com/a.jpg") == "https://example.com/a.jpg"

    def test_mapping_becomes_hosted_image(self) -> None:
        ref = to_image_ref(HOSTED)

        assert isinstance(ref, HostedImage)
        assert public_id_of(ref) == "blog-images/cover"
        assert dump_image_ref(ref) == HOSTED

    def test_bare_url_has_no_public_id(self) -> None:
        assert public_id_of("https://example.com/a.jpg") is None
        assert public_id_of(None) is None

    @pytest.mark.parametrize("value", [42, ["a"], {"url": "https://example.com/a.jpg"}])
    def test_unsupported_values(self, value: object) -> None:
        with pytest.raises(ValueError):
            to_image_ref(value)

    def test_uploaded_image_as_hosted(self) -> None:
        uploaded = UploadedImage(public_id="p", url="https://res.cloudinary.com/p.jpg", width=10)

        assert uploaded.as_hosted() == HostedImage(public_id="p", url="https://res.cloudinary.com/p.jpg")


class TestPagination:
    @pytest.mark.parametrize(
        ("page", "limit", "total", "pages"),
        [(1, 10, 0, 0), (1, 10, 10, 1), (2, 10, 11, 2), (3, 5, 23, 5)],
    )
    def test_build(self, page: int, limit: int, total: int, pages: int) -> None:
        assert Pagination.build(page, limit, total) == Pagination(current=page, pages=pages, total=total)


class TestEnvelope:
    def test_omits_absent_keys(self) -> None:
        assert envelope(message="Blog deleted successfully") == {
            "success": True,
            "message": "Blog deleted successfully",
        }

    def test_models_are_dumped_by_alias(self) -> None:
        content = envelope(
            data=[HostedImage(public_id="a", url="https://res.cloudinary.com/a.jpg")],
            pagination=Pagination.build(1, 10, 1),
            uploads=UploadSummary(success_count=1),
        )

        assert content["data"] == [{"publicId": "a", "url": "https://res.cloudinary.com/a.jpg"}]
        assert content["pagination"] == {"current": 1, "pages": 1, "total": 1}
        assert content["uploads"] == {"successCount": 1, "failureCount": 0, "failed": []}

    def test_failure(self) -> None:
        assert envelope(success=False, message="Error creating blog", error="boom") == {
            "success": False,
            "message": "Error creating blog",
            "error": "boom",
        }


class TestBlogFields:
    def test_defaults_and_tag_normalization(self) -> None:
        fields = BlogFields(title="  Hello  ", body="text", tags=" Python, web,python ")

        assert fields.title == "Hello"
        assert fields.tags == ["python", "web"]
        assert fields.visibility == "draft"
        assert fields.date is None

    def test_rejects_unknown_visibility(self) -> None:
        with pytest.raises(ValidationError):
            BlogFields(title="Hello", body="text", visibility="secret")

    def test_rejects_blank_title(self) -> None:
        with pytest.raises(ValidationError):
            BlogFields(title="   ", body="text")

    def test_patch_leaves_tags_unset(self) -> None:
        patch = BlogPatch(title="New")

        assert patch.tags is None
        assert patch.model_dump(exclude_unset=True) == {"title": "New"}


def test_blog_response_uses_camel_case_aliases() -> None:
    blog = BlogDB(
        title="Hello",
        body="text",
        slug="hello",
        read_time=1,
        banner=HOSTED,
        images=["https://example.com/a.jpg", HOSTED],
        tags=["python"],
        visibility="public",
    )

    dumped = BlogResponse.model_validate(blog).model_dump(by_alias=True, mode="json")

    assert dumped["readTime"] == 1
    assert dumped["createdAt"] is not None
    assert dumped["updatedAt"] is None
    assert dumped["banner"] == HOSTED
    assert dumped["images"] == ["https://example.com/a.jpg", HOSTED]
    assert dumped["id"] == str(blog.id)
