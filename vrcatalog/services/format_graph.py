"""
Format graph validation.

A format is a root element plus the resource elements it depends on. Before
any format list or thumbnail list is stored, every referenced element ID must
resolve to an element the caller owns. Validation builds the complete new list
or raises; nothing is written on failure.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from vrcatalog.core.exceptions import FailedPreconditionException, InvalidArgumentException
from vrcatalog.models.element import ElementType, IMAGE_ELEMENT_TYPES


def referenced_element_ids(
    formats: Iterable[Any] = (),
    thumbnail_ids: Iterable[str] = (),
) -> set[str]:
    """Every element ID a request refers to, for a single lookup."""
    ids: set[str] = set()
    for fmt in formats:
        if fmt.root_id:
            ids.add(fmt.root_id)
        ids.update(fmt.resource_ids or [])
    ids.update(thumbnail_ids)
    return ids


def _resolve(element_id: str, elements: Mapping[str, Any], field: str) -> Any:
    element = elements.get(element_id)
    if element is None:
        raise InvalidArgumentException(
            f"{field} references unknown element '{element_id}'",
            details={"field": field, "element_id": element_id},
        )
    return element


def validate_formats(
    formats: Sequence[Any],
    elements: Mapping[str, Any],
    *,
    replacing: bool = False,
) -> list[dict[str, Any]]:
    """
    Validate requested formats and build their stored form.

    Args:
        formats: Requested formats (``root_id``, ``resource_ids``,
            ``format_complexity``, ``format_scale``)
        elements: Elements the caller may reference, keyed by ID
        replacing: True when the list replaces an existing asset's formats

    Returns:
        Format records with de-duplicated resource IDs and the root's type

    Raises:
        InvalidArgumentException: If a root is missing or any ID is unresolvable,
            or if no format is given on creation
        FailedPreconditionException: If a replacement would leave no formats
    """
    if not formats:
        if replacing:
            raise FailedPreconditionException(
                "An asset must keep at least one format",
                details={"field": "formats"},
            )
        raise InvalidArgumentException(
            "At least one format is required",
            details={"field": "formats"},
        )

    records = []
    for index, fmt in enumerate(formats):
        path = f"formats[{index}]"
        if not fmt.root_id:
            raise InvalidArgumentException(
                f"{path}.root_id is required",
                details={"field": f"{path}.root_id"},
            )

        root = _resolve(fmt.root_id, elements, f"{path}.root_id")
        for resource_index, resource_id in enumerate(fmt.resource_ids or []):
            _resolve(resource_id, elements, f"{path}.resource_ids[{resource_index}]")

        records.append({
            "root_id": fmt.root_id,
            "resource_ids": list(dict.fromkeys(fmt.resource_ids or [])),
            "format_type": ElementType(root.element_type).value,
            "format_complexity": dict(fmt.format_complexity) if fmt.format_complexity else None,
            "format_scale": dict(fmt.format_scale) if fmt.format_scale else None,
        })

    return records


def validate_thumbnails(
    thumbnail_ids: Sequence[str],
    elements: Mapping[str, Any],
    field: str = "thumbnail_ids",
) -> list[str]:
    """
    Check that every thumbnail ID is an image element the caller owns.

    Raises:
        InvalidArgumentException: If an ID is unresolvable or not an image
    """
    for index, thumbnail_id in enumerate(thumbnail_ids):
        path = f"{field}[{index}]"
        element = _resolve(thumbnail_id, elements, path)
        if ElementType(element.element_type) not in IMAGE_ELEMENT_TYPES:
            raise InvalidArgumentException(
                f"{path} must reference an image element",
                details={"field": path, "element_type": ElementType(element.element_type).value},
            )
    return list(dict.fromkeys(thumbnail_ids))
