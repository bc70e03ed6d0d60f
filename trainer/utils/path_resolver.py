"""Path resolution for bundled resources and user data files.

Bundled resources (the default configuration) are read from the package
directory. Writable files (logs) go to a platform-specific user data
directory so that an installed package never writes into site-packages.
"""

import os
import sys
from pathlib import Path


APP_NAME = "StudyOpenings"


def get_package_root() -> Path:
    """Get the directory of the ``trainer`` package.

    Returns:
        Path to the package directory.
    """
    return Path(__file__).resolve().parent.parent


def get_user_data_directory() -> Path:
    """Get the platform-specific user data directory.

    Returns:
        Path to the user data directory for the application.
    """
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        xdg_data_home = os.getenv("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / APP_NAME
        return Path.home() / ".local" / "share" / APP_NAME


def resolve_data_file_path(filename: str) -> Path:
    """Resolve the path for a writable user data file (e.g. a log file).

    The containing directory is created if it does not exist yet.

    Args:
        filename: Name of the data file.

    Returns:
        Path where the file should be written.
    """
    user_data_dir = get_user_data_directory()
    user_data_dir.mkdir(parents=True, exist_ok=True)
    return user_data_dir / filename


def get_package_resource_path(relative_path: str) -> Path:
    """Get the path to a read-only resource shipped inside the package.

    Args:
        relative_path: Path relative to the package directory
                       (e.g., "config/config.json").

    Returns:
        Path to the resource file.
    """
    return get_package_root() / relative_path
