#!/usr/bin/env python3
"""Verify the mascot patch is applied correctly to a workbench file."""

import os
import sys

from mascot_patch import block
from mascot_patch.config import EXT_NAME, LEGACY_EXT_NAMES
from mascot_patch.targets import HostEnvironment, TargetResolver


def _last_line(content):
    lines = content.rstrip().splitlines()
    return lines[-1] if lines else ""


CHECKS = [
    # (description, check(content) -> bool)
    (
        "Exactly one mascot block",
        lambda c: len(block.find_blocks(c, EXT_NAME)) == 1,
    ),
    (
        "No legacy blocks or markers",
        lambda c: not any(block.start_marker(old) in c or block.end_marker(old) in c for old in LEGACY_EXT_NAMES),
    ),
    (
        "Markers paired, no fragments",
        lambda c: not block.is_corrupted(c),
    ),
    (
        "Version stamp present",
        lambda c: f"/*ext.{EXT_NAME}.ver." in c,
    ),
    (
        "Source map reference still last",
        lambda c: block.start_marker(EXT_NAME) not in _last_line(c)
        and ("sourceMappingURL=" not in c or "sourceMappingURL=" in _last_line(c)),
    ),
]


def verify(path):
    """Print one line per check; return (passed, failed descriptions)."""
    if not os.path.exists(path):
        print(f"  MISSING  {path}")
        return 0, ["File not found"]

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    passed = 0
    errors = []
    for desc, check in CHECKS:
        if check(content):
            print(f"  OK       {desc}")
            passed += 1
        else:
            print(f"  FAIL     {desc}")
            errors.append(desc)
    return passed, errors


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        path = argv[0]
    else:
        path = TargetResolver(HostEnvironment.from_env()).resolve().asset_path

    passed, errors = verify(path)

    print()
    print(f"Results: {passed} passed, {len(errors)} failed, {passed + len(errors)} total")

    if errors:
        print()
        print("Failed checks:")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)
    else:
        print("Patch verified.")


if __name__ == "__main__":
    main()
