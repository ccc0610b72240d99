"""Marker-delimited patch block: build, locate, strip, insert.

Wire format::

    /*ext-<name>-start*/
    /*ext.<name>.ver.<version>*/
    <payload>
    /*ext-<name>-end*/

The payload is opaque here. Nothing in this module looks inside it beyond
refusing marker-like text that would confuse the strip regex later.
"""

import re

from .config import EXT_NAME, LEGACY_EXT_NAMES


SOURCE_MAP_RE = re.compile(r"^\s*//[#@]\s*sourceMappingURL=\S*\s*$")
MARKER_LIKE_RE = re.compile(r"/\*\s*ext[-.]")


def start_marker(name):
    return f"/*ext-{name}-start*/"


def end_marker(name):
    return f"/*ext-{name}-end*/"


def version_marker(name, version):
    return f"/*ext.{name}.ver.{version}*/"


def block_re(name):
    return re.compile(
        re.escape(start_marker(name)) + r"[\s\S]*?" + re.escape(end_marker(name))
    )


def _seam_re(name):
    # A block takes the line breaks joining it to the text before it; a block
    # that opens the file takes the ones after it instead.
    body = block_re(name).pattern
    return re.compile(r"(?:\n[ \t]*)+" + body + r"|\A" + body + r"(?:[ \t]*\n)*|" + body)


def _word_re(name):
    return re.compile(re.escape(f"ext-{name}-") + r"(?:start|end)")


# ─── Build / Strip ─────────────────────────────────────────────────────────────

def build(payload, name=EXT_NAME, version="0"):
    """Return the exact block text for ``payload``."""
    payload = (payload or "").strip()
    names = (name,) + tuple(n for n in LEGACY_EXT_NAMES if n != name)
    if MARKER_LIKE_RE.search(payload) or any(_word_re(n).search(payload) for n in names):
        raise ValueError("Payload contains marker-like text (ext-...); refusing to build block")
    lines = [start_marker(name), version_marker(name, version)]
    if payload:
        lines.append(payload)
    lines.append(end_marker(name))
    return "\n".join(lines)


def strip(content, name=EXT_NAME):
    """Remove every complete block for ``name`` together with its seam.

    Text outside the removed blocks is kept byte for byte.
    """
    return _seam_re(name).sub("", content)


def strip_all(content, name=EXT_NAME, legacy=LEGACY_EXT_NAMES):
    for old in legacy:
        content = strip(content, old)
    return strip(content, name)


def find_blocks(content, name=EXT_NAME):
    return [m.group(0) for m in block_re(name).finditer(content)]


def _normalize(text):
    return " ".join(text.split())


def contains_current(content, built_block):
    return _normalize(built_block) in _normalize(content)


# ─── Insert ────────────────────────────────────────────────────────────────────

def insert(content, block):
    """Insert ``block`` at the end, keeping a trailing source map line last.

    Trailing whitespace of ``content`` stays at the end, so ``strip`` gives
    the original text back.
    """
    body = content.rstrip()
    if not body:
        return block
    tail = content[len(body):]

    head, sep, last = body.rpartition("\n")
    if SOURCE_MAP_RE.match(last):
        if head.strip():
            return f"{head}\n{block}\n{last}{tail}"
        return f"{block}\n{last}{tail}"
    return f"{body}\n{block}{tail}"


# ─── Corruption ────────────────────────────────────────────────────────────────

def _fragment_re(name):
    # A marker that lost its "/*" head or "*/" tail to a truncated strip.
    word = _word_re(name).pattern
    return re.compile(r"(?<!/\*)" + word + r"|" + word + r"(?!\*/)")


def _markers_paired(content, name):
    marker_re = re.compile(re.escape(start_marker(name)) + "|" + re.escape(end_marker(name)))
    open_block = False
    for m in marker_re.finditer(content):
        is_start = m.group(0) == start_marker(name)
        if is_start == open_block:
            # Nested start, or end with no start before it.
            return False
        open_block = is_start
    return not open_block


def corruption_reason(content, names=(EXT_NAME,) + tuple(LEGACY_EXT_NAMES)):
    """Describe the first corruption found, or return None."""
    for name in names:
        if not _markers_paired(content, name):
            return f"unpaired {name} markers"
        if _fragment_re(name).search(content):
            return f"malformed {name} marker fragment"
    return None


def is_corrupted(content, names=(EXT_NAME,) + tuple(LEGACY_EXT_NAMES)):
    return corruption_reason(content, names) is not None
