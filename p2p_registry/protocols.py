import logging
import socket
from typing import Optional

from p2p_registry import codec
from p2p_registry.constants import Constants
from p2p_registry.dictionaries import RegistrySnapshot, RequestType
from p2p_registry.errors import TransportError
from p2p_registry.helpers import join_address, split_address

logger = logging.getLogger("__main__")


class TCPProtocol:
    """
    Client side of the registry protocol, for talking to the node listening at url:port.
    Each call opens a new connection, sends one request, and returns once the remote node
    has closed the connection, meaning it has finished handling the request.
    """

    def __init__(self, url: str, port: int, timeout: Optional[float] = Constants.REQUEST_TIMEOUT_SEC):
        self.url = url
        self.port = port
        self.timeout = timeout

    @classmethod
    def from_address(cls, address: str, **kwargs) -> "TCPProtocol":
        url, port = split_address(address)
        return cls(url, port, **kwargs)

    @property
    def address(self) -> str:
        return join_address(self.url, self.port)

    def _request(self, request: bytes, read_reply: bool = False) -> Optional[RegistrySnapshot]:
        try:
            sock = socket.create_connection((self.url, self.port), timeout=self.timeout)
        except OSError as error:
            raise TransportError(f"Could not connect to {self.address}: {error}") from error

        reply: Optional[RegistrySnapshot] = None
        try:
            with sock, sock.makefile("rwb") as stream:
                codec.write(stream, request)
                sock.shutdown(socket.SHUT_WR)
                if read_reply:
                    peers = codec.read_peer_list(stream)
                    files = codec.read_file_list(stream)
                    reply = RegistrySnapshot(peers=peers, files=files)
                # The node closes the connection once the request has been applied.
                stream.read()
        except OSError as error:
            raise TransportError(f"Connection with {self.address} failed: {error}") from error
        return reply

    def add_peer(self, our_port: int) -> RegistrySnapshot:
        """
        Asks the remote node to add us as a peer. It replies with the peers and files it knew
        before adding us.
        :param our_port: Port we are listening on.
        :return:
        """
        logger.debug(f"[Client] Sending add-peer to {self.address}.")
        return self._request(codec.encode_request(RequestType.ADD_PEER, our_port), read_reply=True)

    def remove_peer(self, our_port: int) -> None:
        logger.debug(f"[Client] Sending remove-peer to {self.address}.")
        self._request(codec.encode_request(RequestType.REMOVE_PEER, our_port))

    def add_file(self, our_port: int, filename: str) -> None:
        logger.debug(f"[Client] Sending add-file {filename} to {self.address}.")
        self._request(codec.encode_request(RequestType.ADD_FILE, our_port, filename))

    def remove_file(self, our_port: int, filename: str) -> None:
        logger.debug(f"[Client] Sending remove-file {filename} to {self.address}.")
        self._request(codec.encode_request(RequestType.REMOVE_FILE, our_port, filename))
