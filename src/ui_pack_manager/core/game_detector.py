"""Auto-detect installed client flavors and running game clients"""

from pathlib import Path
from typing import Iterable, Optional

import psutil

from ..config.paths import AppPaths
from ..config.schema import Installation
from ..logging_config import get_logger
from .errors import PreconditionError

logger = get_logger("game_detector")

# Executable names of the game clients (retail, classic, PTR, beta)
GAME_PROCESS_NAMES = frozenset({
    "wow.exe",
    "wowclassic.exe",
    "wowt.exe",
    "wowb.exe",
    "wow-64.exe",
    "wowclassict.exe",
    "wowclassicb.exe",
})


class GameDetector:
    """Detect client flavor folders and running game processes.

    Checks the default install root to determine which client flavors
    are present on the system.
    """

    def __init__(self, game_root: Optional[Path] = None):
        self.game_root = game_root or AppPaths.GAME_ROOT_DEFAULT

    def detect_all(self) -> list[Installation]:
        """Detect all known flavors and create the installation list.

        Flavors that are not found are still listed, disabled.

        Returns:
            List of Installation objects, one per known flavor
        """
        installations = []
        for flavor in AppPaths.FLAVOR_DIRS:
            root = self.game_root / flavor
            found = root.is_dir()
            if found:
                logger.info(f"Detected client flavor {flavor} at {root}")
            installations.append(Installation(flavor=flavor, root=root, enabled=found))
        return installations

    def verify_installation(self, installation: Installation) -> dict[str, bool]:
        """Verify the paths for an installation exist.

        Args:
            installation: The installation to verify

        Returns:
            Dictionary with 'root', 'addons' and 'wtf' keys indicating existence
        """
        return {
            "root": installation.root.is_dir(),
            "addons": AppPaths.addons_dir(installation.root).is_dir(),
            "wtf": (installation.root / AppPaths.WTF_DIR).is_dir(),
        }


def find_running_clients(names: Iterable[str] = GAME_PROCESS_NAMES) -> list[str]:
    """Names of running game client processes.

    Processes that vanish or deny access during the scan are skipped.
    """
    wanted = {name.lower() for name in names}
    running = []
    for proc in psutil.process_iter(["name"]):
        name = proc.info.get("name") or ""
        if name.lower() in wanted:
            running.append(name)
    return sorted(set(running))


def ensure_game_not_running(names: Iterable[str] = GAME_PROCESS_NAMES) -> None:
    """Refuse to continue while a game client is running.

    Raises:
        PreconditionError: If any known client process is found
    """
    running = find_running_clients(names)
    if running:
        raise PreconditionError(
            f"The game is running ({', '.join(running)}). Close it and try again."
        )
