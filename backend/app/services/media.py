from typing import Final

IMAGE_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {"image/png", "image/jpeg", "image/webp", "image/gif"}
)
SVG_CONTENT_TYPE: Final[str] = "image/svg+xml"


def allowed_content_types(allow_svg: bool = False) -> frozenset[str]:
    if allow_svg:
        return IMAGE_CONTENT_TYPES | {SVG_CONTENT_TYPE}
    return IMAGE_CONTENT_TYPES


def is_allowed_content_type(
    content_type: str,
    allowed: frozenset[str] = IMAGE_CONTENT_TYPES,
) -> bool:
    # Exact, case-sensitive match; parameters such as "; charset=" are not stripped.
    return content_type in allowed
