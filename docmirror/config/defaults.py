# docmirror Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "source": {
        "root": "~/Documents/notes",
    },
    "mirror": {
        "root": "~/.local/share/docmirror/notes",
        "directory_policy": "keep",
        "copy_buffer_size": 65536,
        "mtime_tolerance_ms": 0,
    },
    "scheduler": {
        "max_workers": None,
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
        "log_level": "INFO",
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# docmirror Configuration
#
# source.root   - directory exposed as the source tree (e.g. a mounted drive)
# mirror.root   - local directory kept in sync with the source tree
#
# Directory policy:
#   - keep:  local directories missing from the source are left alone
#   - prune: local directories missing from the source are deleted
#
# mirror.mtime_tolerance_ms: raise to 2000 when mirror.root is on FAT,
# whose 2 s timestamps would otherwise make every run recopy every file
#
# scheduler.max_workers: null uses one worker per CPU

"""
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
