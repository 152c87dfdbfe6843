# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Reading and writing persisted redirect tables.

Table format (one file per locale, UTF-8):
- Line 1 is the literal header ``# FROM-URL<TAB>TO-URL`` (discarded on read)
- Every further line is ``from<TAB+>to``
- Rows are sorted ascending by (from, to)

Strict loading raises on encoded URLs and case-insensitively duplicated
sources. Relaxed loading logs and drops those entries so the table can be
repaired by the next write.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List, Set

from locale_redirects.models import RedirectError, RedirectPair, ValidationRule
from locale_redirects.slugs import decode_path, decode_uri
from locale_redirects.validator import RedirectValidator

logger = logging.getLogger(__name__)

TABLE_HEADER = "# FROM-URL\tTO-URL"
REDIRECTS_FILENAME = "_redirects.txt"

_FIELD_SEPARATOR = re.compile(r"\t+")


def parse_pairs(content: str) -> List[RedirectPair]:
    """Parse table text into pairs, skipping the header line.

    Raises:
        RedirectError: If a line has no tab separator.
    """
    pairs: List[RedirectPair] = []
    lines = content.strip().split("\n")[1:]
    for line_number, raw_line in enumerate(lines, 2):
        line = raw_line.strip()
        if not line:
            continue
        fields = _FIELD_SEPARATOR.split(line, maxsplit=1)
        if len(fields) != 2:
            raise RedirectError(
                f"Line {line_number} is not a tab-separated pair: {line!r}",
                url=line,
                rule=ValidationRule.MALFORMED_URL,
            )
        pairs.append((fields[0], fields[1]))
    return pairs


def decode_pair(pair: RedirectPair) -> RedirectPair:
    from_url, to_url = pair
    if to_url.startswith("/"):
        decoded_to = decode_path(to_url)
    else:
        decoded_to = decode_uri(to_url)
    return decode_path(from_url), decoded_to


def decode_pairs(pairs: Iterable[RedirectPair]) -> List[RedirectPair]:
    return [decode_pair(pair) for pair in pairs]


def _encoded_url(pair: RedirectPair) -> str:
    """Return the first URL of pair that is not fully decoded, or ""."""
    decoded_from, decoded_to = decode_pair(pair)
    if decoded_from != pair[0]:
        return pair[0]
    if decoded_to != pair[1]:
        return pair[1]
    return ""


def error_on_encoded(pairs: Iterable[RedirectPair]) -> None:
    """Raise if any stored URL still contains percent-escapes."""
    for pair in pairs:
        encoded = _encoded_url(pair)
        if encoded:
            role = "From" if encoded == pair[0] else "To"
            raise RedirectError(
                f"{role} URL must be decoded: {encoded}",
                url=encoded,
                rule=ValidationRule.ENCODED_URL,
            )


def error_on_duplicated(pairs: Iterable[RedirectPair]) -> None:
    """Raise if two pairs share a case-insensitively equal source."""
    seen: Set[str] = set()
    for from_url, _ in pairs:
        from_lower = from_url.lower()
        if from_lower in seen:
            raise RedirectError(
                f"Duplicated redirect: {from_lower}",
                url=from_url,
                rule=ValidationRule.DUPLICATE_SOURCE,
            )
        seen.add(from_lower)


def drop_encoded(pairs: Iterable[RedirectPair]) -> List[RedirectPair]:
    """Relaxed counterpart of error_on_encoded: log and drop offenders."""
    kept: List[RedirectPair] = []
    for pair in pairs:
        encoded = _encoded_url(pair)
        if encoded:
            logger.warning(f"dropping redirect with encoded URL {encoded}: {pair[0]}\t{pair[1]}")
            continue
        kept.append(pair)
    return kept


def drop_duplicated(pairs: Iterable[RedirectPair]) -> List[RedirectPair]:
    """Relaxed counterpart of error_on_duplicated: the first source wins."""
    seen: Set[str] = set()
    kept: List[RedirectPair] = []
    for from_url, to_url in pairs:
        from_lower = from_url.lower()
        if from_lower in seen:
            logger.warning(f"dropping duplicated redirect: {from_url}\t{to_url}")
            continue
        seen.add(from_lower)
        kept.append((from_url, to_url))
    return kept


def read_pairs(file_path: Path) -> List[RedirectPair]:
    """Read a persisted table's rows as written, without any checks."""
    return parse_pairs(Path(file_path).read_text(encoding="utf-8"))


def check_pairs(
    pairs: Iterable[RedirectPair],
    validator: RedirectValidator,
    strict: bool = True,
    check_path: bool = False,
) -> List[RedirectPair]:
    """Integrity-check and validate rows read from a table.

    Args:
        pairs: Rows in file order.
        validator: Validates every pair (without resolve-checking).
        strict: Raise on encoded or duplicated entries. When False,
            offending entries are logged and dropped.
        check_path: Also apply the document-existence rules. Off by default:
            a table is re-validated with existence checks after merging,
            once conflicting and orphaned entries had a chance to go.

    Returns:
        The rows that passed, in file order.

    Raises:
        RedirectError: On any violation that is fatal in the chosen mode.
    """
    pairs = list(pairs)
    if strict:
        error_on_encoded(pairs)
        error_on_duplicated(pairs)
    else:
        pairs = drop_duplicated(drop_encoded(pairs))

    validator.validate_pairs(pairs, check_path=check_path)
    return pairs


def load_pairs_from_file(
    file_path: Path,
    validator: RedirectValidator,
    strict: bool = True,
    check_path: bool = False,
) -> List[RedirectPair]:
    """Read a persisted table and run check_pairs() over its rows.

    Raises:
        RedirectError: On any violation that is fatal in the chosen mode.
        OSError: If the file can't be read.
    """
    pairs = check_pairs(read_pairs(file_path), validator, strict=strict, check_path=check_path)
    logger.debug(f"Loaded {len(pairs)} redirects from {file_path}")
    return pairs


def format_pairs(pairs: Iterable[RedirectPair]) -> str:
    lines = [TABLE_HEADER]
    lines.extend(f"{from_url}\t{to_url}" for from_url, to_url in pairs)
    return "\n".join(lines) + "\n"


def save_pairs(file_path: Path, pairs: Iterable[RedirectPair]) -> None:
    """Write pairs to file_path atomically (temp file + os.replace).

    Pairs are written in the given order; callers pass flattened, sorted pairs.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    pairs = list(pairs)
    content = format_pairs(pairs)

    fd, temp_path = tempfile.mkstemp(
        dir=str(file_path.parent),
        prefix=".redirects_",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, file_path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.info(f"Wrote {len(pairs)} redirects to {file_path}")
