"""Query-string composition for endpoint paths."""

from typing import Any, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from pydantic import BaseModel

Options = Union[BaseModel, Mapping[str, Any]]


def _is_empty(value: Any) -> bool:
    # Zero values are omitted, like unset optional fields
    return value is None or value is False or value == 0 or value == "" or value == []


def _format_value(value: Any) -> str:
    if value is True:
        return "true"
    return str(value)


def _option_items(opts: Optional[Options]) -> List[Tuple[str, str]]:
    if opts is None:
        return []
    if isinstance(opts, BaseModel):
        data = opts.model_dump(by_alias=True, exclude_none=True, mode="json")
    elif isinstance(opts, Mapping):
        data = dict(opts)
    else:
        raise TypeError(f"unsupported options type: {type(opts).__name__}")

    items: List[Tuple[str, str]] = []
    for key, value in data.items():
        if _is_empty(value):
            continue
        if isinstance(value, (list, tuple)):
            items.extend((key, _format_value(v)) for v in value if not _is_empty(v))
        else:
            items.append((key, _format_value(value)))
    return items


def add_options(path: str, opts: Optional[Options]) -> str:
    """Append options to a path as URL query parameters.

    Existing query parameters on ``path`` are preserved. Options with
    zero values (None, False, 0, empty) are omitted; list values become
    repeated keys.

    :param path: Endpoint path, optionally with a query string
    :type path: str
    :param opts: Pydantic model (serialized by alias) or mapping
    :type opts: Optional[Options]
    :return: Path with the query string applied
    :rtype: str
    :raises TypeError: If ``opts`` is neither a model nor a mapping

    Example:
        >>> add_options("/tickets.json", CursorPagination(page_size=50))
        '/tickets.json?page%5Bsize%5D=50'
    """
    extra = _option_items(opts)
    if not extra:
        return path

    parsed = urlparse(path)
    query = parse_qsl(parsed.query, keep_blank_values=True)
    query.extend(extra)
    return urlunparse(parsed._replace(query=urlencode(query)))
