"""Console logging and small file/process helpers shared by the patcher."""

import os
import shutil
import subprocess
import sys
import tempfile


# ─── Logging ────────────────────────────────────────────────────────────────────

PREFIXES = {"INFO": "  ", "OK": "  ✓", "FAIL": "  ✗", "WARN": "  !", "SKIP": "  →"}


def log(msg, level="INFO"):
    print(f"{PREFIXES.get(level, '  ')} {msg}")


def section(title):
    print(f"\n=== {title} ===")


def fatal(msg):
    print(f"\n  ✗ FATAL: {msg}", file=sys.stderr)
    sys.exit(1)


# ─── Files & Processes ─────────────────────────────────────────────────────────

def run_cmd(cmd, check=True, capture=True, timeout=120, **kwargs):
    """Run a shell command."""
    return subprocess.run(
        cmd, shell=isinstance(cmd, str), check=check,
        capture_output=capture, text=True, timeout=timeout, **kwargs
    )


def read_file(path):
    """Read file content."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_file(path, content):
    """Write file content."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def replace_file(path, content):
    """Write content to a sibling temp file, then rename it over ``path``.

    Readers see either the old file or the new one, never a partial write.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(path):
            shutil.copymode(path, tmp)
        else:
            os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
