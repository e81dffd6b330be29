# gitbulk Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "sync": {
        "max_depth": 20,
        "reset_max_depth": 10,
        "default_operation": "rebase",
        "default_reset_mode": "hard",
        "auto_stash": True,
        "force": False,
        "follow_symlinks": False,
        "exclude": ["node_modules"],
    },
    "clone": {
        "method": "https",
        "target_dir": ".",
        "include_forks": False,
        "include_private": False,
        "jobs": 5,
        "update_existing": False,
    },
    "output": {
        "verbose": False,
        "colored": True,
    },
}

_HEADER = """\
# gitbulk configuration
#
# sync:   defaults for 'gitbulk sync' and 'gitbulk reset'
#         (operations: pull, fetch, rebase, merge, stash-pull)
#         (reset modes: soft, hard, clean, pull, origin)
# clone:  defaults for 'gitbulk clone' (GITHUB_TOKEN is read from the environment)
# output: console settings

"""


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """
    Generate the default configuration file content.

    Returns:
        YAML text with an explanatory header.
    """
    body = yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return _HEADER + body
