"""
Cursor pagination and on-demand expansion of list/get responses.

Both operate on records the caller already fetched from a ``ResourceStore``;
lookups of other records go through a resolver callback supplied by the service.
"""

from typing import Any, Callable, Sequence

from paysim.core.schemas.base import ListParams, coerce_list, parse_params

# (id, param name) -> record; raises NotFoundException for unknown ids
CursorResolver = Callable[[str, str], dict]
# (field name, bare id) -> full object, or None when it can't be resolved
ExpansionResolver = Callable[[str, str], dict | None]


def list_envelope(data: list[dict], has_more: bool, url: str) -> dict[str, Any]:
    return {"object": "list", "data": data, "has_more": has_more, "url": url}


def _position(records: Sequence[dict], record_id: str) -> int:
    for index, record in enumerate(records):
        if record["id"] == record_id:
            return index
    return -1


def apply_list_options(
    records: Sequence[dict],
    params: dict[str, Any],
    resolver: CursorResolver,
    url: str = "",
    default_limit: int = 10,
    max_limit: int = 100,
) -> dict[str, Any]:
    """
    Slice an insertion-ordered sequence into one page of the list envelope.

    Supported params:
        limit: Page size, default ``default_limit``, at most ``max_limit``.
        starting_after: Return records strictly after this id.
        ending_before: Return records strictly before this id, in forward order.

    When both cursors are given ``starting_after`` wins. A cursor id is resolved
    through ``resolver`` first, so unknown ids raise the service's not-found error.
    A cursor that exists but is filtered out of ``records`` yields an empty page.

    Args:
        records: Already-filtered records, oldest first.
        params: Request params.
        resolver: ``(id, param_name) -> record`` lookup that raises for unknown ids.
        url: Value of the envelope's ``url`` field.
        default_limit: Page size when ``limit`` is not given.
        max_limit: Largest accepted ``limit``.

    Returns:
        dict: ``{"object": "list", "data": [...], "has_more": bool, "url": url}``.
        ``has_more`` is true iff records remain beyond the page in the
        direction of travel.
    """
    options = parse_params(ListParams, params, context={"max_limit": max_limit})
    limit = options.limit or default_limit
    starting_after = options.starting_after
    ending_before = options.ending_before

    if starting_after:
        resolver(starting_after, "starting_after")
        index = _position(records, starting_after)
        remaining = list(records[index + 1 :]) if index >= 0 else []
        return list_envelope(remaining[:limit], len(remaining) > limit, url)

    if ending_before:
        resolver(ending_before, "ending_before")
        index = _position(records, ending_before)
        preceding = list(records[:index]) if index >= 0 else []
        return list_envelope(preceding[-limit:], len(preceding) > limit, url)

    return list_envelope(list(records[:limit]), len(records) > limit, url)


def normalize_expand(expand: Any) -> list[str]:
    """Turn ``expand``/``expand[]`` param values into a de-duplicated list of paths."""
    paths: list[str] = []
    for value in coerce_list(expand):
        path = str(value).strip()
        if path and path not in paths:
            paths.append(path)
    return paths


def _expand_path(
    obj: dict,
    segments: list[str],
    expandable_fields: Sequence[str] | None,
    resolver: ExpansionResolver,
) -> None:
    head, rest = segments[0], segments[1:]
    if expandable_fields is not None and head not in expandable_fields:
        return
    if head not in obj:
        return

    value = obj[head]
    if isinstance(value, str):
        value = resolver(head, value)
        if value is None:
            return

    if rest and isinstance(value, dict):
        value = dict(value)
        if value.get("object") == "list" and rest[0] == "data" and len(rest) > 1:
            members = []
            for item in value.get("data", []):
                item = dict(item)
                _expand_path(item, rest[1:], None, resolver)
                members.append(item)
            value["data"] = members
        else:
            _expand_path(value, rest, None, resolver)

    obj[head] = value


def expand_object(
    record: dict,
    expandable_fields: Sequence[str],
    expand: Any,
    resolver: ExpansionResolver,
) -> dict:
    """
    Inline referenced objects into a record on request.

    Only fields listed in ``expandable_fields`` are expanded at the top level;
    a dotted path (``customer.default_source``) then descends into the expanded
    object. Unknown or non-expandable names are ignored without error.

    The stored record is never modified: a shallow copy is returned whenever
    anything was requested.

    Args:
        record: The record to expand.
        expandable_fields: Top-level fields that may be expanded.
        expand: Requested paths (a string or a list of strings).
        resolver: ``(field, id) -> object | None``.

    Returns:
        dict: The record, or an expanded shallow copy of it.
    """
    paths = normalize_expand(expand)
    if not paths:
        return record
    expanded = dict(record)
    for path in paths:
        _expand_path(expanded, path.split("."), expandable_fields, resolver)
    return expanded


def expand_list(
    envelope: dict,
    expandable_fields: Sequence[str],
    expand: Any,
    resolver: ExpansionResolver,
) -> dict:
    """
    Apply ``data.``-prefixed expansion paths to every member of a list envelope.

    ``expand[]=data.customer`` expands ``customer`` in each member; paths that
    don't start with ``data.`` are ignored.
    """
    member_paths = [
        path[len("data.") :]
        for path in normalize_expand(expand)
        if path.startswith("data.") and len(path) > len("data.")
    ]
    if not member_paths:
        return envelope
    expanded = dict(envelope)
    expanded["data"] = [
        expand_object(item, expandable_fields, member_paths, resolver)
        for item in envelope["data"]
    ]
    return expanded


__all__ = [
    "CursorResolver",
    "ExpansionResolver",
    "list_envelope",
    "apply_list_options",
    "normalize_expand",
    "expand_object",
    "expand_list",
]
