#!/usr/bin/env python3
"""
Mascot patcher for the VS Code workbench.

Injects the animated mascot overlay into VS Code's workbench bundle, keeps a
pristine backup for recovery, and removes the patch again on request.

Usage:
    python3 autopatch.py install                 # Patch with the saved options
    python3 autopatch.py toggle                  # Enable/disable the mascot, then re-patch
    python3 autopatch.py select fox              # Switch pet, then re-patch
    python3 autopatch.py uninstall               # Remove the patch
    python3 autopatch.py status                  # Show target, blocks, backup
    python3 autopatch.py install --dry-run       # Don't write anything
"""

import argparse
import sys

from mascot_patch import __version__
from mascot_patch.applier import PatchApplier, status
from mascot_patch.backup import BackupManager
from mascot_patch.errors import InstallFailed
from mascot_patch.escalate import PermissionEscalator
from mascot_patch.payload import PETS, payload_from_store
from mascot_patch.store import PET_ENABLED, PET_TYPE, JsonStore
from mascot_patch.targets import HostEnvironment, TargetResolver
from mascot_patch.util import fatal, log, section


# ─── Commands ──────────────────────────────────────────────────────────────────

def report(result):
    if not result.ok:
        fatal(result.message)
    log(result.message, "OK")
    if result.restart_required:
        print("\n  Configuration changed. Restart VS Code to apply.")


def cmd_list(store):
    current = store.get(PET_TYPE)
    for value, (_folder, _idle, _walk, label, desc) in PETS.items():
        mark = "  ✓" if value == current else ""
        print(f"  {value:<12} {label} ({desc}){mark}")


def cmd_status(target):
    section("Status")
    info = status(target)
    log(f"Target: {info['target']} ({info['path']})")
    if not info["exists"]:
        log("Workbench file not found", "FAIL")
        return
    log(f"Mascot blocks: {info['blocks']}", "OK" if info["blocks"] == 1 else "WARN")
    if info["legacy_blocks"]:
        log(f"Legacy blocks: {info['legacy_blocks']}", "WARN")
    if info["corruption"]:
        log(f"Corrupted: {info['corruption']}", "FAIL")
    log(f"Backup: {'present' if info['backup'] else 'missing'}", "OK" if info["backup"] else "WARN")


def reapply_on_change(store, applier, results):
    """Re-run install whenever one of the mascot options changes."""
    def on_change(name, _value):
        if name in (PET_ENABLED, PET_TYPE):
            results.append(applier.install())
    return store.subscribe(on_change)


# ─── Main ──────────────────────────────────────────────────────────────────────

def build_parser():
    parser = argparse.ArgumentParser(
        description="Mascot patcher for the VS Code workbench"
    )
    parser.add_argument("--app-root", help="VS Code app root (default: $VSCODE_APP_ROOT or platform default)")
    parser.add_argument("--extension-root", default="", help="Directory holding resources/pet/*")
    parser.add_argument("--state-file", help="Options file (default: ~/.vscode-mascot/state.json)")
    parser.add_argument(
        "--strict-backup", action="store_true",
        help="Abort the install if the first-run backup cannot be written"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Show what would be done without modifying files"
    )
    parser.add_argument("--version", action="version", version=__version__)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("install", help="Patch the workbench with the saved options")
    sub.add_parser("uninstall", help="Remove the patch")
    sub.add_parser("toggle", help="Enable or disable the mascot")
    select = sub.add_parser("select", help="Choose the pet variant")
    select.add_argument("pet", choices=sorted(PETS))
    sub.add_parser("list", help="List pet variants")
    sub.add_parser("status", help="Show patch state")
    sub.add_parser("forget-backup", help="Delete the backup so the next install takes a fresh one")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    print("=" * 60)
    print(f"  VS Code Mascot Patcher {__version__}")
    print("=" * 60)

    store = JsonStore(args.state_file) if args.state_file else JsonStore()
    if args.command == "list":
        cmd_list(store)
        return

    section("Target Discovery")
    target = TargetResolver(HostEnvironment.from_env(args.app_root)).resolve()

    if args.command == "status":
        cmd_status(target)
        return

    escalator = PermissionEscalator()
    if args.command == "forget-backup":
        try:
            BackupManager(escalator).invalidate(target)
        except InstallFailed as e:
            fatal(e.user_message)
        return

    applier = PatchApplier(
        target,
        lambda: payload_from_store(store, args.extension_root),
        escalator=escalator,
        strict_backup=args.strict_backup,
        dry_run=args.dry_run,
    )

    section("Patch")
    if args.command == "install":
        report(applier.install())
    elif args.command == "uninstall":
        report(applier.uninstall())
    else:
        results = []
        reapply_on_change(store, applier, results)
        if args.command == "toggle":
            enabled = not store.get(PET_ENABLED)
            store.update(PET_ENABLED, enabled)
            log(f"Mascot {'enabled' if enabled else 'disabled'}", "OK")
        else:
            store.update(PET_TYPE, args.pet)
            log(f"Pet set to {args.pet}", "OK")
        # Selecting the already-active pet fires no change; patch anyway.
        report(results[-1] if results else applier.install())


if __name__ == "__main__":
    sys.exit(main())
