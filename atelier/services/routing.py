"""Location-fragment parsing for the hash-routed site."""

import re
from urllib.parse import parse_qsl

from atelier.models.route import Route

ROUTE_MARKER = "#/"

# "#/", "#" or a bare leading "/" all introduce the routed path
_MARKER_PATTERN = re.compile(r"^#?/?")


def parse_route(fragment: str | None) -> Route:
    """Turn a location fragment into a :class:`Route`.

    Empty path segments are dropped, the first remaining segment names the
    page and the rest become positional params.  Query pairs follow URL
    decoding rules and later duplicates overwrite earlier ones.  A fragment
    with no usable path segment is the home route.
    """
    if not fragment:
        return Route()

    clean = _MARKER_PATTERN.sub("", fragment, count=1)
    path, _, query_string = clean.partition("?")

    segments = [segment for segment in path.split("/") if segment]
    query = dict(parse_qsl(query_string, keep_blank_values=True))

    if not segments:
        return Route(query=query)
    return Route(page=segments[0], params=segments[1:], query=query)


def to_fragment(target: str) -> str:
    """Prefix *target* with the fragment marker unless it already has one."""
    return target if target.startswith("#") else f"#{target}"
