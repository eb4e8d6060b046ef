import argparse
import logging
from sys import stdout
from threading import Thread

from requests import get

from p2p_registry import helpers
from p2p_registry.constants import Constants
from p2p_registry.dispatcher import RequestDispatcher
from p2p_registry.networking import RegistryServer
from p2p_registry.node import Node
from p2p_registry.storage import VirtualRegistryStorage


def handle_terminal(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Peer and file registry node.")
    parser.add_argument("--use_global_ip", action="store_true",
                        help="If our global IP should be used as our own address, instead of 127.0.0.1.")
    parser.add_argument("--port", type=int, required=False, default=Constants.DEFAULT_PORT,
                        help="Port to listen on, another free port is used if it is taken.")
    parser.add_argument("--bootstrap", required=False, default=None, metavar="HOST:PORT",
                        help="Address of a peer to join the network through on start-up.")
    parser.add_argument("--verbose", "-v", action="store_true", required=False, default=False,
                        help="If logs should be verbose.")
    return parser.parse_args(argv)


def create_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("__main__")
    handler = logging.StreamHandler(stdout)
    level = logging.DEBUG if verbose else logging.INFO

    # clear the log file
    with open(Constants.LOG_FILE, "w"):
        pass

    logging.basicConfig(filename=Constants.LOG_FILE, level=level,
                        format="%(asctime)s [%(levelname)s] %(message)s")
    handler.setLevel(level)

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', datefmt="%H:%M:%S")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_our_ip(use_global_ip: bool) -> str:
    """
    Returns the host we advertise ourselves as. The global IP needs port forwarding to be useful.
    """
    if use_global_ip:
        response = get(Constants.GLOBAL_IP_URL, timeout=Constants.REQUEST_TIMEOUT_SEC)
        response.raise_for_status()
        return response.content.decode("utf8").strip()
    return Constants.DEFAULT_HOST


def initialise_node(port: int, use_global_ip: bool,
                    logger: logging.Logger | None = None) -> tuple[Node, RegistryServer, Thread]:
    """
    Creates our node and its server, sharing one registry, and starts the server on its own thread.
    """
    our_ip = get_our_ip(use_global_ip)
    if logger:
        logger.info(f"Our hostname is {our_ip}.")

    valid_port = helpers.get_valid_port(preferred=port)
    if logger:
        logger.info(f"Port free at {valid_port}, creating our node here.")

    storage = VirtualRegistryStorage()
    node = Node(host=our_ip, port=valid_port, storage=storage)
    server = RegistryServer(("0.0.0.0", valid_port), RequestDispatcher(storage))
    server_thread = server.thread_start()

    return node, server, server_thread
