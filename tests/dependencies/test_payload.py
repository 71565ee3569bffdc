# tests/dependencies/test_payload.py
"""Tests for request payload parsing and query dependencies."""

from io import BytesIO

import pytest
from starlette.datastructures import FormData, Headers, UploadFile

from app.dependencies.dependencies import (
    _payload_from_form,
    _payload_from_json,
    get_blog_list_query,
)
from app.errors import ValidationError
from app.schemas.media import HostedImage

HOSTED = {"publicId": "cover", "url": "https://res.cloudinary.com/demo/image/upload/cover.jpg"}


def upload(filename: str, data: bytes = b"data") -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": "image/jpeg"}),
    )


class TestJsonPayload:
    def test_fields_and_images(self) -> None:
        payload = _payload_from_json(
            {
                "title": "Hello",
                "body": "text",
                "tags": ["a"],
                "banner": HOSTED,
                "images": ["https://example.com/a.jpg", HOSTED],
                "unknown": "ignored",
            },
        )

        assert payload.fields == {"title": "Hello", "body": "text", "tags": ["a"]}
        assert isinstance(payload.banner, HostedImage)
        assert payload.images == ["https://example.com/a.jpg", HostedImage.model_validate(HOSTED)]

    def test_absent_images_mean_unchanged(self) -> None:
        payload = _payload_from_json({"title": "Hello"})

        assert payload.banner is None
        assert payload.images is None

    def test_null_subtitle_is_kept(self) -> None:
        assert _payload_from_json({"subtitle": None}).fields == {"subtitle": None}

    def test_empty_image_list_clears_gallery(self) -> None:
        assert _payload_from_json({"images": []}).images == []

    def test_single_image_is_wrapped(self) -> None:
        assert _payload_from_json({"images": "https://example.com/a.jpg"}).images == [
            "https://example.com/a.jpg",
        ]

    def test_invalid_image_object(self) -> None:
        with pytest.raises(ValidationError):
            _payload_from_json({"banner": {"url": "https://example.com/a.jpg"}})

    def test_body_must_be_object(self) -> None:
        with pytest.raises(ValidationError, match="JSON object"):
            _payload_from_json(["not", "an", "object"])


class TestFormPayload:
    def test_files_and_urls(self) -> None:
        banner = upload("banner.jpg")
        first = upload("one.jpg")
        form = FormData(
            [
                ("title", "Hello"),
                ("body", "text"),
                ("tags", "python, web"),
                ("tags", "api"),
                ("banner", banner),
                ("images", first),
                ("images", "https://example.com/b.jpg"),
            ],
        )

        payload = _payload_from_form(form)

        assert payload.fields == {"title": "Hello", "body": "text", "tags": ["python, web", "api"]}
        assert payload.banner is banner
        assert payload.images == [first, "https://example.com/b.jpg"]

    def test_blank_values_are_ignored(self) -> None:
        form = FormData(
            [
                ("title", ""),
                ("subtitle", "Sub"),
                ("banner", upload("")),
                ("images", ""),
            ],
        )

        payload = _payload_from_form(form)

        assert payload.fields == {"subtitle": "Sub"}
        assert payload.banner is None
        assert payload.images is None

    def test_blank_subtitle_clears_it(self) -> None:
        payload = _payload_from_form(FormData([("title", ""), ("subtitle", "")]))

        assert payload.fields == {"subtitle": None}

    def test_banner_url(self) -> None:
        form = FormData([("banner", " https://example.com/cover.jpg ")])

        assert _payload_from_form(form).banner == "https://example.com/cover.jpg"


class TestBlogListQuery:
    def test_normalizes_tags_and_search(self) -> None:
        query = get_blog_list_query(page=2, limit=5, visibility="public", tags="AI, ml,ai", search="  ")

        assert query.page == 2
        assert query.limit == 5
        assert query.visibility == "public"
        assert query.tags == ("ai", "ml")
        assert query.search is None

    def test_defaults(self) -> None:
        query = get_blog_list_query()

        assert query.tags == ()
        assert query.search is None
