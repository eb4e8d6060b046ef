import logging
import socketserver
import threading

from p2p_registry.constants import Constants
from p2p_registry.dispatcher import RequestDispatcher
from p2p_registry.errors import ProtocolError, TransportError
from p2p_registry.helpers import format_registry

logger = logging.getLogger("__main__")


class RegistryRequestHandler(socketserver.StreamRequestHandler):
    """
    One accepted connection is one request. socketserver closes the connection once handle() returns.
    """
    # Blocking reads, a stalled peer holds up the node until it sends or disconnects.
    timeout = None

    def handle(self) -> None:
        host: str = self.client_address[0]
        self.server: RegistryServer
        dispatcher = self.server.dispatcher

        try:
            dispatcher.dispatch(self.rfile, self.wfile, host)
        except TransportError as e:
            logger.error(f"[Server] Connection with {host} failed mid-request: {e}")
        except ProtocolError as e:
            logger.error(f"[Server] Bad request from {host}: {e}")

        status = format_registry(dispatcher.storage.get_peers(), dispatcher.storage.get_files())
        logger.info(f"[Server] Registry after request from {host}:\n{status}")


class RegistryServer(socketserver.TCPServer):
    """
    Accepts connections one at a time and handles each to completion before accepting the next.
    TCPServer is used rather than ThreadingTCPServer, so requests never overlap.
    """
    allow_reuse_address = True
    request_queue_size = Constants.LISTEN_BACKLOG

    def __init__(self, server_address: tuple[str, int], dispatcher: RequestDispatcher):
        logger.info(f"[Server] Server socket address: {server_address}")
        self.dispatcher = dispatcher
        socketserver.TCPServer.__init__(
            self,
            server_address=server_address,
            RequestHandlerClass=RegistryRequestHandler
        )

    @property
    def port(self) -> int:
        return self.server_address[1]

    def start(self) -> None:
        """
        Starts the server, blocking until thread_stop() is called from another thread.
        :return:
        """
        logger.info("[Server] Starting server...")
        self.serve_forever()

    def thread_start(self) -> threading.Thread:
        """
        Starts the server on a daemon thread that is returned.
        :return: Thread the server is running on
        """
        thread = threading.Thread(target=self.start, daemon=True)
        thread.start()
        return thread

    def thread_stop(self, thread: threading.Thread) -> None:
        """
        Stops the server running on the given thread and waits for the thread to finish.
        :param thread:
        :return:
        """
        self.shutdown()
        self.server_close()
        thread.join()
        logger.info("[Server] Server stopped.")
