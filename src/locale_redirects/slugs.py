# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""URL decoding and slug-to-folder helpers."""

import re
from typing import List
from urllib.parse import unquote

# Characters whose escapes are kept when decoding a full URI
_RESERVED_URI_CHARACTERS = frozenset(";/?:@&=+$,#")

_ESCAPE_RUN = re.compile(r"(?:%[0-9A-Fa-f]{2})+")


def decode_path(path: str) -> str:
    """Percent-decode every ``/``-separated segment of a URL path."""
    return "/".join(unquote(segment) for segment in path.split("/"))


def _decode_escape_run(match: "re.Match[str]") -> str:
    run = match.group(0)
    parts: List[str] = []
    pending = bytearray()

    for index in range(0, len(run), 3):
        token = run[index : index + 3]
        value = int(token[1:], 16)
        if value < 0x80 and chr(value) in _RESERVED_URI_CHARACTERS:
            if pending:
                parts.append(pending.decode("utf-8", errors="replace"))
                pending.clear()
            parts.append(token)
        else:
            pending.append(value)

    if pending:
        parts.append(pending.decode("utf-8", errors="replace"))
    return "".join(parts)


def decode_uri(url: str) -> str:
    """Decode a full URI, leaving escapes of reserved characters intact."""
    return _ESCAPE_RUN.sub(_decode_escape_run, url)


def slug_to_folder(slug: str, joiner: str = "/") -> str:
    """Map a document slug to its folder path inside a content root."""
    folder = (
        slug.replace("*", "_star_")
        .replace("::", "_doublecolon_")
        .replace(":", "_colon_")
        .replace("?", "_question_")
        .lower()
    )
    return joiner.join(folder.split("/"))
