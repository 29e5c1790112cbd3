"""RPC host - serves a stateless payload plugin over stdin/stdout

Usage: python -m payloadsdk.rpc_host /path/to/plugin.py [--export NAME]

The host application spawns this as a child process. The plugin module
exports a plain config object (metadata + handlers) under `plugin`; this
script loads it, constructs a PayloadPlugin and serves until stdin closes or
a termination signal arrives.

Exit status: 0 on graceful shutdown, 1 when no entry is given, the module
cannot be loaded, it has no config export, or its payloadName is malformed.
"""

import argparse
import importlib.util
import json
import sys
from pathlib import Path
from typing import List, Optional

from payloadsdk.manifest import ManifestError
from payloadsdk.plugin_runtime import PayloadPlugin, PayloadPluginConfig, PluginConfigError
from payloadsdk.rpc.registry import RegistryError

DEFAULT_EXPORT = "plugin"
MANIFEST_FILE = "plugin.json"
DEFAULT_ENTRY = "plugin.py"

_MODULE_NAME = "payloadsdk_loaded_plugin"


def resolve_entry(entry: str) -> Path:
    """Resolve a plugin entry to a module file.

    A directory is resolved through the `entry` field of its plugin.json.
    """
    path = Path(entry).resolve()
    if path.is_dir():
        manifest_path = path / MANIFEST_FILE
        entry_name = DEFAULT_ENTRY
        if manifest_path.is_file():
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            entry_name = manifest.get("entry") or DEFAULT_ENTRY
        path = path / entry_name
    return path


def load_plugin_config(entry: str, export: str = DEFAULT_EXPORT) -> PayloadPluginConfig:
    """Import a plugin module from a file path and return its config.

    Raises:
        FileNotFoundError: If the entry does not exist
        PluginConfigError: If the module has no config export with metadata
    """
    path = resolve_entry(entry)
    if not path.is_file():
        raise FileNotFoundError(f"Plugin entry not found: {path}")

    # Sibling modules of the entry are importable by the plugin
    plugin_dir = str(path.parent)
    if plugin_dir not in sys.path:
        sys.path.insert(0, plugin_dir)

    spec = importlib.util.spec_from_file_location(_MODULE_NAME, path)
    if spec is None or spec.loader is None:
        raise PluginConfigError(f"Cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[_MODULE_NAME] = module
    spec.loader.exec_module(module)

    return PayloadPluginConfig.from_object(getattr(module, export, None))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payload-rpc-host",
        description="Serve a payload plugin over newline-delimited JSON-RPC on stdin/stdout",
    )
    parser.add_argument("entry", nargs="?", help="Plugin module file, or a directory with plugin.json")
    parser.add_argument(
        "--export",
        default=DEFAULT_EXPORT,
        help=f"Module attribute holding the plugin config (default: {DEFAULT_EXPORT})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.entry:
        print("Usage: payload-rpc-host <plugin-entry>", file=sys.stderr)
        return 1

    absolute_path = Path(args.entry).resolve()
    try:
        config = load_plugin_config(args.entry, args.export)
    except PluginConfigError:
        print(f"Error: Plugin at {absolute_path} has no {args.export} export with metadata", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: Failed to load plugin at {absolute_path}: {e}", file=sys.stderr)
        return 1

    try:
        plugin = PayloadPlugin(config)
    except (ManifestError, RegistryError, PluginConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return plugin.run()


if __name__ == "__main__":
    sys.exit(main())
