import logging
from threading import RLock

from p2p_registry.interfaces import IRegistryStorage

logger = logging.getLogger("__main__")


class VirtualRegistryStorage(IRegistryStorage):
    """
    Simple registry storage that keeps peers and files in memory for the life of the process.
    """

    def __init__(self):
        # dicts keep insertion order, the values of _peers are unused.
        self._peers: dict[str, None] = {}
        self._files: dict[str, str] = {}
        self.lock = RLock()

    def add_peer(self, address: str) -> None:
        with self.lock:
            if address in self._peers:
                logger.warning(f"{address} already exists in list of peers.")
                return
            self._peers[address] = None
        logger.debug(f"Added peer {address}.")

    def remove_peer(self, address: str) -> None:
        with self.lock:
            self._peers.pop(address, None)
        logger.debug(f"Removed peer {address}.")

    def remove_peer_files(self, address: str) -> None:
        """
        Removes every file owned by the given peer, the cascade half of removing a peer.
        :param address:
        :return:
        """
        with self.lock:
            owned = [filename for filename, owner in self._files.items() if owner == address]
            for filename in owned:
                del self._files[filename]
        if owned:
            logger.debug(f"Removed {len(owned)} file(s) owned by {address}.")

    def add_file(self, filename: str, address: str) -> None:
        with self.lock:
            self._files[filename] = address
        logger.debug(f"{filename} is available at {address}.")

    def remove_file(self, filename: str, address: str) -> None:
        # Anyone may remove any entry by name, the address is only logged.
        with self.lock:
            self._files.pop(filename, None)
        logger.debug(f"Removed {filename} (requested by {address}).")

    def get_peers(self) -> list[str]:
        with self.lock:
            return list(self._peers)

    def get_files(self) -> dict[str, str]:
        with self.lock:
            return dict(self._files)

    def contains_peer(self, address: str) -> bool:
        with self.lock:
            return address in self._peers

    def contains_file(self, filename: str) -> bool:
        with self.lock:
            return filename in self._files
