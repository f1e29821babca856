import pytest

from app.services.media import (
    IMAGE_CONTENT_TYPES,
    SVG_CONTENT_TYPE,
    allowed_content_types,
    is_allowed_content_type,
)


@pytest.mark.parametrize("content_type", sorted(IMAGE_CONTENT_TYPES))
def test_image_types_are_allowed(content_type):
    assert is_allowed_content_type(content_type)


@pytest.mark.parametrize(
    "content_type",
    ["image/PNG", "image/jpg", "image/*", "application/octet-stream", "", SVG_CONTENT_TYPE],
)
def test_other_types_are_rejected(content_type):
    assert not is_allowed_content_type(content_type)


def test_svg_is_opt_in():
    assert SVG_CONTENT_TYPE not in allowed_content_types()
    allowed = allowed_content_types(allow_svg=True)
    assert is_allowed_content_type(SVG_CONTENT_TYPE, allowed)
    assert IMAGE_CONTENT_TYPES < allowed
