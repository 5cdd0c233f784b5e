"""Default paths for game installations and application data"""

import os
from pathlib import Path


def _env_dir(var: str, fallback: Path) -> Path:
    value = os.environ.get(var)
    return Path(value) if value else fallback


class AppPaths:
    """Default paths for game installations and application files.

    All paths use environment variable expansion for portability.
    """

    # Game install root (contains one folder per client flavor)
    GAME_ROOT_DEFAULT = Path(r"C:\Program Files (x86)\World of Warcraft")

    # Client flavor folders under the install root
    FLAVOR_DIRS = ("_retail_", "_classic_", "_classic_era_", "_ptr_", "_beta_")

    # Layout of a client flavor folder
    INTERFACE_DIR = "Interface"
    ADDONS_DIR = "AddOns"
    WTF_DIR = "WTF"
    ACCOUNT_DIR = "Account"
    SAVED_VARIABLES_DIR = "SavedVariables"
    CONFIG_WTF = "Config.wtf"
    LAYOUT_FILE = "layout-local.txt"
    BUILD_INFO_FILE = ".build.info"

    # Default pack output location
    OUTPUT_DEFAULT = _env_dir("USERPROFILE", Path.home()) / "UIPacks"

    # Configuration file location
    CONFIG_DIR = _env_dir("APPDATA", Path.home() / ".config") / "UIPackManager"
    CONFIG_FILE = CONFIG_DIR / "configuration.xml"
    LOG_FILE = CONFIG_DIR / "ui_pack_manager.log"

    @classmethod
    def expand_path(cls, path_str: str) -> Path:
        """Expand environment variables in path string.

        Args:
            path_str: Path string potentially containing environment variables

        Returns:
            Path object with expanded variables
        """
        return Path(os.path.expandvars(path_str))

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Ensure the configuration directory exists.

        Returns:
            Path to the configuration directory
        """
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        return cls.CONFIG_DIR

    @classmethod
    def addons_dir(cls, root: Path) -> Path:
        return root / cls.INTERFACE_DIR / cls.ADDONS_DIR

    @classmethod
    def account_root(cls, root: Path) -> Path:
        """Folder holding one subfolder per account (``WTF/Account``)."""
        return root / cls.WTF_DIR / cls.ACCOUNT_DIR
