import logging
from typing import Callable, Optional

from p2p_registry.constants import Constants
from p2p_registry.dictionaries import RegistrySnapshot
from p2p_registry.errors import InvalidAddressError, TransportError
from p2p_registry.helpers import join_address
from p2p_registry.interfaces import IRegistryStorage
from p2p_registry.protocols import TCPProtocol
from p2p_registry.storage import VirtualRegistryStorage

logger = logging.getLogger("__main__")


class Node:
    """
    A peer on the network: the registry its server answers from, plus the client side
    operations it uses to join, share files with, and leave the network.
    """

    def __init__(self, host: str, port: int, storage: Optional[IRegistryStorage] = None,
                 timeout: Optional[float] = Constants.REQUEST_TIMEOUT_SEC):
        """
        :param host: Host other peers see us as, only used to recognise ourselves and label our own files.
        :param port: Port our server listens on, sent with every request.
        :param storage: Registry storage, shared with our server's dispatcher.
        :param timeout: Timeout for each outgoing request.
        """
        self.host = host
        self.port = port
        self.storage: IRegistryStorage = storage if storage is not None else VirtualRegistryStorage()
        self.timeout = timeout

    @property
    def address(self) -> str:
        return join_address(self.host, self.port)

    def protocol_for(self, address: str) -> TCPProtocol:
        return TCPProtocol.from_address(address, timeout=self.timeout)

    def merge(self, snapshot: RegistrySnapshot) -> None:
        """
        Adds the peers and files from an add-peer reply to our registry, skipping ourselves.
        :param snapshot:
        :return:
        """
        with self.storage.lock:
            for peer in snapshot["peers"]:
                if peer != self.address and not self.storage.contains_peer(peer):
                    self.storage.add_peer(peer)
            for filename, owner in snapshot["files"].items():
                self.storage.add_file(filename, owner)

    def join(self, bootstrap_address: str) -> RegistrySnapshot:
        """
        Joins the network through a peer that is already on it. The bootstrap peer replies with
        the peers and files it knows about, then every one of those peers is told about us too.
        A failure talking to the bootstrap peer is raised, failures with the other peers are logged.
        :param bootstrap_address: "host:port" of a peer on the network.
        :return: What the bootstrap peer replied with.
        """
        if bootstrap_address == self.address:
            raise InvalidAddressError(f"Cannot join the network through ourselves ({self.address}).")
        logger.info(f"[Client] Joining network through {bootstrap_address}.")
        snapshot = self.protocol_for(bootstrap_address).add_peer(self.port)
        self.merge(snapshot)
        if not self.storage.contains_peer(bootstrap_address):
            self.storage.add_peer(bootstrap_address)

        others = [peer for peer in snapshot["peers"] if peer not in (self.address, bootstrap_address)]
        self._broadcast(others, "add-peer",
                        lambda protocol: self.merge(protocol.add_peer(self.port)))
        return snapshot

    def share_file(self, filename: str) -> list[str]:
        """
        Registers a file as available here, locally and with every known peer.
        :param filename:
        :return: Addresses of peers that could not be told.
        """
        self.storage.add_file(filename, self.address)
        return self._broadcast(self.storage.get_peers(), "add-file",
                               lambda protocol: protocol.add_file(self.port, filename))

    def unshare_file(self, filename: str) -> list[str]:
        """
        Withdraws a file, locally and with every known peer.
        :param filename:
        :return: Addresses of peers that could not be told.
        """
        self.storage.remove_file(filename, self.address)
        return self._broadcast(self.storage.get_peers(), "remove-file",
                               lambda protocol: protocol.remove_file(self.port, filename))

    def leave(self) -> list[str]:
        """
        Tells every known peer to remove us (and so our files), then forgets every peer and file.
        :return: Addresses of peers that could not be told.
        """
        peers = self.storage.get_peers()
        failed = self._broadcast(peers, "remove-peer",
                                 lambda protocol: protocol.remove_peer(self.port))
        with self.storage.lock:
            for peer in peers:
                self.storage.remove_peer_files(peer)
                self.storage.remove_peer(peer)
            self.storage.remove_peer_files(self.address)
        logger.info("[Client] Left the network.")
        return failed

    def _broadcast(self, peers: list[str], request_name: str,
                   send: Callable[[TCPProtocol], None]) -> list[str]:
        failed: list[str] = []
        for peer in peers:
            try:
                send(self.protocol_for(peer))
            except (TransportError, InvalidAddressError) as e:
                logger.warning(f"[Client] Could not send {request_name} to {peer}: {e}")
                failed.append(peer)
        return failed
