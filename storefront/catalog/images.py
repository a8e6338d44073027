"""
Image Resolver

Picks the representative image URL for a product:

1. the first image flagged ``is_main``
2. otherwise the image with the smallest ``position`` (input order breaks ties)
3. otherwise the product's legacy ``image_url`` column
4. otherwise the configured placeholder
"""

from typing import Any, Dict, List, Optional, Sequence

from storefront.catalog.rows import field


def _position(image: Any) -> int:
    position = field(image, "position")
    return position if position is not None else 0


def _product_level(images: Optional[Sequence[Any]]) -> List[Any]:
    return [img for img in (images or []) if field(img, "variant_id") is None]


def pick_image_url(images: Optional[Sequence[Any]]) -> Optional[str]:
    """Return the main image URL, else the lowest-position one, else None."""
    images = list(images or [])
    if not images:
        return None

    for image in images:
        if field(image, "is_main"):
            return field(image, "image_url")

    # min() keeps the first of equal positions
    return field(min(images, key=_position), "image_url")


def resolve_image_url(
    images: Optional[Sequence[Any]],
    legacy_url: Optional[str] = None,
    placeholder: Optional[str] = None,
) -> Optional[str]:
    """
    Resolve a product's representative image.

    Variant-specific images are ignored here; they belong to the variant.

    Args:
        images: ``product_images`` rows (may be empty)
        legacy_url: The product's single ``image_url`` column
        placeholder: URL used when nothing else is available

    Returns:
        Image URL, or the placeholder (None only when no placeholder is given)
    """
    url = pick_image_url(_product_level(images))
    if url:
        return url
    if legacy_url:
        return legacy_url
    return placeholder


def resolve_variant_image(
    variant_images: Optional[Sequence[Any]],
    product_images: Optional[Sequence[Any]],
    legacy_url: Optional[str] = None,
    placeholder: Optional[str] = None,
) -> Optional[str]:
    """Variant's own image first, then the product's representative image."""
    ordered = sorted_images(variant_images)
    if ordered:
        return field(ordered[0], "image_url")
    return resolve_image_url(product_images, legacy_url, placeholder)


def sorted_images(images: Optional[Sequence[Any]]) -> List[Any]:
    """Images in display order (stable on equal positions)."""
    return sorted(images or [], key=_position)


def image_payload(image: Any, fallback_alt: str = "") -> Dict[str, Any]:
    return {
        "id": field(image, "id"),
        "url": field(image, "image_url"),
        "alt": field(image, "alt_text") or fallback_alt,
        "is_main": bool(field(image, "is_main")),
        "position": _position(image),
    }
