"""
Filter, order and pagination engine for asset listings.

Everything here is a pure function over assets that were already loaded.
Callers build an ``AssetQuery`` from the raw request strings with
``build_query`` and page through candidates with ``run_query``.

Filter syntax is a comma separated list of ``key:value`` terms, all of which
must match. A backslash escapes the next character, so ``category:a\\,b``
matches the tag ``a,b`` and ``\\:`` / ``\\\\`` are a literal colon and
backslash.

Page tokens are keyset cursors: they carry the sort key of the last returned
asset (plus the asset ID as tie-breaker), never an offset, so inserts and
deletes in front of the cursor cannot shift the next page.
"""

import base64
import bisect
import hashlib
import json
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

from vrcatalog.auth.permissions import can_view
from vrcatalog.core.exceptions import InvalidArgumentException
from vrcatalog.models.asset import AccessLevel, AssetLicense
from vrcatalog.models.element import ElementType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
PAGE_TOKEN_VERSION = 1
ESCAPE = "\\"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True)
class QueryContext:
    """Per-request facts predicates may depend on."""
    caller_id: str | None = None
    liked_asset_ids: frozenset[str] = frozenset()


# ===================
# Filters
# ===================

@dataclass(frozen=True)
class FilterKey:
    """How one filter key parses its value and tests an asset."""
    parse: Callable[[str], Any]
    matches: Callable[[Any, Any, QueryContext], bool]


@dataclass(frozen=True)
class FilterTerm:
    key: str
    value: Any
    raw: str


def _parse_text(value: str) -> str:
    return value


def _parse_enum(enum_cls) -> Callable[[str], Any]:
    def parse(value: str):
        try:
            return enum_cls(value)
        except ValueError:
            choices = ", ".join(member.value for member in enum_cls)
            raise ValueError(f"expected one of {choices}")
    return parse


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


FILTER_KEYS: dict[str, FilterKey] = {
    "account_id": FilterKey(
        _parse_text,
        lambda asset, value, ctx: asset.owner_id == value,
    ),
    "admin_tag": FilterKey(
        _parse_text,
        lambda asset, value, ctx: value in (asset.admin_tags or []),
    ),
    "category": FilterKey(
        _parse_text,
        lambda asset, value, ctx: value in (asset.tags or []),
    ),
    "format_type": FilterKey(
        _parse_enum(ElementType),
        lambda asset, value, ctx: asset.format_type == value.value,
    ),
    "license": FilterKey(
        _parse_enum(AssetLicense),
        lambda asset, value, ctx: asset.license == value,
    ),
    "liked": FilterKey(
        _parse_bool,
        lambda asset, value, ctx: (asset.id in ctx.liked_asset_ids) == value,
    ),
}


def register_filter_key(
    name: str,
    parse: Callable[[str], Any],
    matches: Callable[[Any, Any, QueryContext], bool],
) -> None:
    """Add a filter key. ``parse`` raises ValueError for bad values."""
    if name in FILTER_KEYS:
        raise ValueError(f"Filter key already registered: {name}")
    FILTER_KEYS[name] = FilterKey(parse, matches)


def _split_unescaped(text: str, separator: str, maxsplit: int = -1) -> list[str]:
    """
    Split on unescaped separators.
    Escape sequences are kept in the pieces so they can be split again.
    """
    parts: list[str] = []
    current: list[str] = []
    escaped = False

    for char in text:
        if escaped:
            current.append(ESCAPE + char)
            escaped = False
        elif char == ESCAPE:
            escaped = True
        elif char == separator and len(parts) != maxsplit:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)

    if escaped:
        raise InvalidArgumentException(
            "Filter ends with a dangling escape character",
            details={"filter": text},
        )

    parts.append("".join(current))
    return parts


def _strip_unescaped(text: str) -> str:
    """Trim surrounding whitespace, keeping trailing whitespace that is escaped."""
    text = text.lstrip()
    end = len(text)
    while end > 0 and text[end - 1].isspace():
        head = text[: end - 1]
        if (len(head) - len(head.rstrip(ESCAPE))) % 2:
            break
        end -= 1
    return text[:end]


def _unescape(text: str) -> str:
    result: list[str] = []
    chars = iter(text)
    for char in chars:
        if char == ESCAPE:
            following = next(chars, None)
            if following is None:
                raise InvalidArgumentException(
                    "Filter ends with a dangling escape character",
                    details={"filter": text},
                )
            result.append(following)
        else:
            result.append(char)
    return "".join(result)


def parse_filter(filter_str: str | None) -> tuple[FilterTerm, ...]:
    """
    Parse a filter string into terms.

    Raises:
        InvalidArgumentException: On an empty term, a missing ':', an empty
            key or value, an unknown key, or a value the key cannot parse
    """
    if filter_str is None or not filter_str.strip():
        return ()

    terms: list[FilterTerm] = []
    for raw_term in _split_unescaped(filter_str, ","):
        term = _strip_unescaped(raw_term)
        if not term:
            raise InvalidArgumentException(
                "Filter contains an empty term",
                details={"filter": filter_str},
            )

        pieces = _split_unescaped(term, ":", maxsplit=1)
        if len(pieces) != 2:
            raise InvalidArgumentException(
                f"Filter term '{term}' is not of the form key:value",
                details={"term": term},
            )

        key = _unescape(_strip_unescaped(pieces[0]))
        value = _unescape(_strip_unescaped(pieces[1]))
        if not key or not value:
            raise InvalidArgumentException(
                f"Filter term '{term}' needs both a key and a value",
                details={"term": term},
            )

        filter_key = FILTER_KEYS.get(key)
        if filter_key is None:
            raise InvalidArgumentException(
                f"Unknown filter key '{key}'",
                details={"key": key, "supported": sorted(FILTER_KEYS)},
            )

        try:
            parsed = filter_key.parse(value)
        except ValueError as e:
            raise InvalidArgumentException(
                f"Invalid value '{value}' for filter key '{key}': {e}",
                details={"key": key, "value": value},
            )

        terms.append(FilterTerm(key=key, value=parsed, raw=value))

    return tuple(terms)


def matches_filters(asset: Any, terms: Sequence[FilterTerm], context: QueryContext) -> bool:
    return all(FILTER_KEYS[term.key].matches(asset, term.value, context) for term in terms)


# ===================
# Ordering
# ===================

@dataclass(frozen=True)
class OrderTerm:
    field: str
    descending: bool = False


def timestamp_micros(value: datetime) -> int:
    """Microseconds since the epoch. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _MICROSECOND


# Every order field maps an asset to an integer so descending order is negation
ORDER_FIELDS: dict[str, Callable[[Any], int]] = {
    "create_time": lambda asset: timestamp_micros(asset.create_time),
}

DEFAULT_ORDER = (OrderTerm("create_time", descending=True),)


def parse_order_by(order_by: str | None) -> tuple[OrderTerm, ...]:
    """
    Parse ``field [asc|desc], ...``. Empty input gives newest first.

    Raises:
        InvalidArgumentException: On empty, malformed, unsupported or repeated fields
    """
    if order_by is None or not order_by.strip():
        return DEFAULT_ORDER

    terms: list[OrderTerm] = []
    seen: set[str] = set()
    for raw_field in order_by.split(","):
        words = raw_field.split()
        if not words:
            raise InvalidArgumentException(
                "order_by contains an empty field",
                details={"order_by": order_by},
            )
        if len(words) > 2 or (len(words) == 2 and words[1] not in ("asc", "desc")):
            raise InvalidArgumentException(
                f"Malformed order_by field '{raw_field.strip()}'",
                details={"order_by": order_by},
            )

        name = words[0]
        if name not in ORDER_FIELDS:
            raise InvalidArgumentException(
                f"Unsupported order_by field '{name}'",
                details={"field": name, "supported": sorted(ORDER_FIELDS)},
            )
        if name in seen:
            raise InvalidArgumentException(
                f"order_by field '{name}' is given more than once",
                details={"field": name},
            )

        seen.add(name)
        terms.append(OrderTerm(name, descending=len(words) == 2 and words[1] == "desc"))

    return tuple(terms)


def sort_key(asset: Any, order: Sequence[OrderTerm]) -> tuple:
    """Total sort key: the order fields, then the asset ID."""
    values = []
    for term in order:
        value = ORDER_FIELDS[term.field](asset)
        values.append(-value if term.descending else value)
    return (*values, asset.id)


# ===================
# Page tokens
# ===================

class PageToken(BaseModel):
    """Decoded page token: version, query fingerprint, last sort key."""

    model_config = ConfigDict(extra="forbid", strict=True)

    v: int
    q: str
    k: list[int | str]


def encode_page_token(key: tuple, fingerprint: str) -> str:
    token = PageToken(v=PAGE_TOKEN_VERSION, q=fingerprint, k=list(key))
    encoded = base64.urlsafe_b64encode(token.model_dump_json().encode("utf-8"))
    return encoded.decode("ascii").rstrip("=")


def decode_page_token(page_token: str, fingerprint: str, order: Sequence[OrderTerm]) -> tuple:
    """
    Decode a page token back into a sort key.

    Raises:
        InvalidArgumentException: If the token is corrupt, from another token
            version, or was issued for a different query
    """
    padded = page_token + "=" * (-len(page_token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        token = PageToken.model_validate_json(raw)
    except ValueError as e:
        logger.debug(f"Rejected page token {page_token!r}: {e}")
        raise InvalidArgumentException("Invalid page token")

    if token.v != PAGE_TOKEN_VERSION:
        raise InvalidArgumentException(
            "Unsupported page token version",
            details={"version": token.v},
        )
    if token.q != fingerprint:
        raise InvalidArgumentException(
            "Page token does not match the filter and order of this request"
        )

    key = token.k
    field_values, last_id = key[:-1], key[-1] if key else None
    if (
        len(key) != len(order) + 1
        or not all(isinstance(value, int) for value in field_values)
        or not isinstance(last_id, str)
    ):
        raise InvalidArgumentException("Invalid page token")

    return tuple(key)


def query_fingerprint(scope: str, filters: Sequence[FilterTerm], order: Sequence[OrderTerm]) -> str:
    """Stable digest of everything that defines a result sequence."""
    canonical = json.dumps(
        [
            scope,
            sorted([term.key, term.raw] for term in filters),
            [[term.field, term.descending] for term in order],
        ],
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


# ===================
# Queries
# ===================

def resolve_page_size(
    page_size: int | None,
    maximum: int,
    default: int = DEFAULT_PAGE_SIZE,
) -> int:
    """Unset or non-positive sizes use the default; large sizes are clamped."""
    if page_size is None or page_size <= 0:
        return min(default, maximum)
    return min(page_size, maximum)


@dataclass(frozen=True)
class AssetQuery:
    """A parsed, validated listing request."""
    scope: str
    allowed_levels: frozenset[AccessLevel]
    filters: tuple[FilterTerm, ...]
    order: tuple[OrderTerm, ...]
    page_size: int
    fingerprint: str
    cursor: tuple | None = None


@dataclass(frozen=True)
class QueryPage:
    items: list
    next_page_token: str
    total_items: int


def build_query(
    scope: str,
    allowed_levels: frozenset[AccessLevel],
    filter_str: str | None = None,
    order_by: str | None = None,
    page_size: int | None = None,
    page_token: str | None = None,
    max_page_size: int = 1000,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> AssetQuery:
    """
    Validate the raw listing parameters.

    Args:
        scope: Identifies the candidate set (e.g. "global", "account:<id>");
            page tokens are only valid within the scope that issued them
        allowed_levels: Endpoint candidate restriction
        filter_str: Raw filter string
        order_by: Raw order_by string
        page_size: Requested page size
        page_token: Token from a previous page, empty for the first page
        max_page_size: Clamp for page_size

    Raises:
        InvalidArgumentException: If any parameter is malformed
    """
    try:
        filters = parse_filter(filter_str)
        order = parse_order_by(order_by)
    except InvalidArgumentException as e:
        logger.debug(f"Rejected listing query filter={filter_str!r} order_by={order_by!r}: {e.message}")
        raise
    fingerprint = query_fingerprint(scope, filters, order)
    cursor = decode_page_token(page_token, fingerprint, order) if page_token else None

    return AssetQuery(
        scope=scope,
        allowed_levels=allowed_levels,
        filters=filters,
        order=order,
        page_size=resolve_page_size(page_size, max_page_size, default_page_size),
        fingerprint=fingerprint,
        cursor=cursor,
    )


def run_query(candidates: Iterable[Any], query: AssetQuery, context: QueryContext) -> QueryPage:
    """
    Produce one page of results.

    Visibility is applied before anything is counted, so ``total_items`` is the
    number of assets the caller may see that match the filter.
    """
    visible = [
        asset for asset in candidates
        if asset.access_level in query.allowed_levels and can_view(asset, context.caller_id)
    ]
    matched = [asset for asset in visible if matches_filters(asset, query.filters, context)]

    ranked = sorted(
        ((sort_key(asset, query.order), asset) for asset in matched),
        key=lambda pair: pair[0],
    )
    keys = [key for key, _ in ranked]

    start = bisect.bisect_right(keys, query.cursor) if query.cursor is not None else 0
    end = start + query.page_size
    items = [asset for _, asset in ranked[start:end]]

    next_page_token = ""
    if end < len(ranked):
        next_page_token = encode_page_token(keys[end - 1], query.fingerprint)

    return QueryPage(items=items, next_page_token=next_page_token, total_items=len(ranked))


def owner_ids(assets: Iterable[Any]) -> list[str]:
    """Distinct owner IDs in first-seen order."""
    return list(dict.fromkeys(asset.owner_id for asset in assets))


def collect_owner_accounts(assets: Iterable[Any], accounts: Mapping[str, Any]) -> dict[str, Any]:
    """Owner account map for a page, one entry per distinct owner."""
    owners: dict[str, Any] = {}
    for asset in assets:
        if asset.owner_id not in owners and asset.owner_id in accounts:
            owners[asset.owner_id] = accounts[asset.owner_id]
    return owners
