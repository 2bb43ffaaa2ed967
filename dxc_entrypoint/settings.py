"""
Initializes the Dynaconf settings object for the dxc_entrypoint component.
This module is the single source of truth for all configuration.

Any key can be overridden from the environment with a ``DXC_`` prefix, e.g.
``DXC_VERSION=1.8.2407`` or ``DXC_BASE_DIR=/tmp/dxc``.
"""

from pathlib import Path
from dynaconf import Dynaconf

PACKAGE_ROOT = Path(__file__).parent

SETTINGS_FILES = ["config/settings.toml"]


def load_settings(*extra_files) -> Dynaconf:
    """Builds a settings object from the packaged file plus ``extra_files``."""
    return Dynaconf(
        root_path=PACKAGE_ROOT,
        settings_files=SETTINGS_FILES + [str(f) for f in extra_files],
        envvar_prefix="DXC",
        merge_enabled=True,
        load_dotenv=False,
        environments=False,
    )
