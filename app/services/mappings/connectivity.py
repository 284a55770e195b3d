"""Connectivity hint."""

from loguru import logger


class Connectivity:
    """Best-guess online flag. A hint for skipping doomed requests, never ground truth."""

    def __init__(self, online: bool = True):
        self._online = online

    def __call__(self) -> bool:
        return self._online

    @property
    def online(self) -> bool:
        return self._online

    def mark_online(self) -> None:
        if not self._online:
            logger.info("Connectivity restored")
        self._online = True

    def mark_offline(self) -> None:
        if self._online:
            logger.warning("Connectivity lost, preferring cached data")
        self._online = False
