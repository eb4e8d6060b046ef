import logging
from typing import BinaryIO, Callable, Optional

from p2p_registry import codec
from p2p_registry.dictionaries import RequestType
from p2p_registry.errors import UnknownRequestError
from p2p_registry.interfaces import IRegistryStorage

logger = logging.getLogger("__main__")


class RequestDispatcher:
    """
    Handles one request per connection: reads the request type, decodes the rest of the request,
    applies it to the registry storage and, for add-peer only, replies with the registry as it was
    before the sender was added.

    Nothing is rolled back if the stream fails part way, whatever steps completed stay applied.
    """

    def __init__(self, storage: IRegistryStorage):
        self.storage = storage
        self.routing_methods: dict[RequestType, str] = {
            RequestType.ADD_PEER: "handle_add_peer",
            RequestType.REMOVE_PEER: "handle_remove_peer",
            RequestType.ADD_FILE: "handle_add_file",
            RequestType.REMOVE_FILE: "handle_remove_file"
        }

    def dispatch(self, rfile: BinaryIO, wfile: BinaryIO, host: str) -> Optional[RequestType]:
        """
        Handles a single request read from rfile, writing any reply to wfile.
        TransportErrors and ProtocolErrors propagate to the caller, which owns the connection.
        :param rfile: Stream the request is read from.
        :param wfile: Stream the reply is written to.
        :param host: Remote address of the connection, without the port.
        :return: The request type handled, or None if the request was ignored.
        """
        try:
            request_type = codec.read_request_type(rfile)
        except UnknownRequestError as e:
            logger.warning(f"[Server] Ignoring request from {host}: {e}")
            return None

        logger.debug(f"[Server] {request_type.name} request from {host}.")
        method: Callable = getattr(self, self.routing_methods[request_type])
        method(rfile, wfile, host)
        return request_type

    def handle_add_peer(self, rfile: BinaryIO, wfile: BinaryIO, host: str) -> None:
        address = codec.read_address(rfile, host)

        # The reply is taken before adding, so a peer never hears about itself.
        with self.storage.lock:
            peers = self.storage.get_peers()
            files = self.storage.get_files()
            codec.write(wfile, codec.encode_peer_list(peers) + codec.encode_file_list(files))
            self.storage.add_peer(address)
        logger.info(f"[Server] Sent {len(peers)} peer(s) and {len(files)} file(s) to {address}.")

    def handle_remove_peer(self, rfile: BinaryIO, wfile: BinaryIO, host: str) -> None:
        address = codec.read_address(rfile, host)
        with self.storage.lock:
            self.storage.remove_peer_files(address)
            self.storage.remove_peer(address)
        logger.info(f"[Server] Removed peer {address} and its files.")

    def handle_add_file(self, rfile: BinaryIO, wfile: BinaryIO, host: str) -> None:
        address = codec.read_address(rfile, host)
        filename = codec.read_string(rfile)
        self.storage.add_file(filename, address)
        logger.info(f"[Server] {address} has {filename}.")

    def handle_remove_file(self, rfile: BinaryIO, wfile: BinaryIO, host: str) -> None:
        address = codec.read_address(rfile, host)
        filename = codec.read_string(rfile)
        self.storage.remove_file(filename, address)
        logger.info(f"[Server] {address} removed {filename}.")
