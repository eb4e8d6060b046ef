from abc import abstractmethod
from threading import RLock


class IRegistryStorage:
    """
    Interface which abstracts how a node keeps its peer set and its file registry.

    Implementations expose a re-entrant lock as "lock". Each method holds it on its own, and callers
    hold it around a sequence of calls that must not interleave with another thread, such as a whole
    request or the removal of a peer together with its files.
    """
    lock: RLock

    @abstractmethod
    def add_peer(self, address: str) -> None:
        """
        Adds a peer address to the end of the peer set, does nothing (apart from a warning) if it is
        already there.
        :param address: "host:port" of the peer.
        :return:
        """
        pass

    @abstractmethod
    def remove_peer(self, address: str) -> None:
        """
        Removes a peer address from the peer set, does nothing if it is not there.
        Callers run remove_peer_files() first so the peer's files go with it.
        :param address:
        :return:
        """
        pass

    @abstractmethod
    def remove_peer_files(self, address: str) -> None:
        """
        Removes every file entry whose owner is the given address.
        :param address:
        :return:
        """
        pass

    @abstractmethod
    def add_file(self, filename: str, address: str) -> None:
        """
        Records that a file is available at an address, replacing any previous owner.
        :param filename:
        :param address:
        :return:
        """
        pass

    @abstractmethod
    def remove_file(self, filename: str, address: str) -> None:
        """
        Removes a file entry by name. The address is accepted but not compared with the stored owner.
        :param filename:
        :param address:
        :return:
        """
        pass

    @abstractmethod
    def get_peers(self) -> list[str]:
        """
        Returns a copy of the peer set, in the order peers were added.
        :return:
        """
        pass

    @abstractmethod
    def get_files(self) -> dict[str, str]:
        """
        Returns a copy of the file registry, filename -> owner address.
        :return:
        """
        pass

    @abstractmethod
    def contains_peer(self, address: str) -> bool:
        """
        Returns if the address is in the peer set.
        :param address:
        :return:
        """
        pass

    @abstractmethod
    def contains_file(self, filename: str) -> bool:
        """
        Returns if the filename has an entry in the file registry.
        :param filename:
        :return:
        """
        pass
