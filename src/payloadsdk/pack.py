"""Plugin packer

Zips a plugin directory into `<payloadName>.zip` for distribution. The
archive holds `<payloadName>/plugin.json` and `<payloadName>/<entry>`.

Usage: python -m payloadsdk.pack [plugin-dir] [--output DIR]
"""

import argparse
import json
import sys
import zipfile
from pathlib import Path
from typing import List, Optional, Tuple, Union

from payloadsdk.manifest import InvalidPayloadNameError, validate_payload_name
from payloadsdk.schema_validation import MetadataValidationError, validate_manifest

MANIFEST_FILE = "plugin.json"


class PackError(Exception):
    """Plugin directory cannot be packed"""
    pass


def read_manifest(plugin_dir: Path) -> dict:
    manifest_path = plugin_dir / MANIFEST_FILE
    if not manifest_path.is_file():
        raise PackError(f"{MANIFEST_FILE} not found in {plugin_dir}")
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise PackError(f"{MANIFEST_FILE} is not valid JSON: {e}")
    if not isinstance(manifest, dict) or not manifest.get("payloadName"):
        raise PackError(f"{MANIFEST_FILE} missing payloadName")
    return manifest


def collect_entries(plugin_dir: Path, manifest: dict) -> List[Tuple[str, Path]]:
    """Archive names and source files for a validated manifest"""
    name = manifest["payloadName"]
    entry = manifest["entry"]
    entry_path = plugin_dir / entry
    if not entry_path.is_file():
        raise PackError(f"{entry} not found")
    return [
        (f"{name}/{MANIFEST_FILE}", plugin_dir / MANIFEST_FILE),
        (f"{name}/{Path(entry).as_posix()}", entry_path),
    ]


def pack_plugin(plugin_dir: Union[str, Path], output_dir: Union[str, Path, None] = None) -> Path:
    """Pack a plugin directory and return the path of the written archive.

    Raises:
        PackError: If the manifest is missing, malformed, or names a missing entry
    """
    plugin_dir = Path(plugin_dir)
    manifest = read_manifest(plugin_dir)

    try:
        validate_payload_name(manifest["payloadName"])
        validate_manifest(manifest)
    except (InvalidPayloadNameError, MetadataValidationError) as e:
        raise PackError(str(e))

    entries = collect_entries(plugin_dir, manifest)

    out_dir = Path(output_dir) if output_dir is not None else plugin_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    zip_path = out_dir / f"{manifest['payloadName']}.zip"

    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for arcname, source in entries:
            archive.write(source, arcname)

    return zip_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="payload-pack", description="Pack a payload plugin into a .zip")
    parser.add_argument("plugin_dir", nargs="?", default=".", help="Plugin directory (default: current directory)")
    parser.add_argument("--output", help="Directory for the archive (default: the plugin directory)")
    args = parser.parse_args(argv)

    try:
        zip_path = pack_plugin(args.plugin_dir, args.output)
    except PackError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    with zipfile.ZipFile(zip_path) as archive:
        count = len(archive.namelist())
    print(f"Packed: {zip_path.name} ({count} files)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
