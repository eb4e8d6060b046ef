import logging
import random
import socket

from p2p_registry.constants import Constants
from p2p_registry.errors import InvalidAddressError

logger = logging.getLogger("__main__")


def join_address(host: str, port: int | str) -> str:
    return f"{host}:{port}"


def split_address(address: str) -> tuple[str, int]:
    """
    Splits "host:port" into its host and integer port. The last colon is used,
    so hosts containing colons are kept whole.
    :param address:
    :return:
    """
    host, separator, port = address.rpartition(":")
    if not separator or not host:
        raise InvalidAddressError(f"Address {address!r} is not of the form host:port.")
    try:
        port_number = int(port)
    except ValueError as error:
        raise InvalidAddressError(f"Address {address!r} has a non-numeric port.") from error
    if not 0 < port_number < 65536:
        raise InvalidAddressError(f"Address {address!r} has a port out of range.")
    return host, port_number


def port_is_free(port: int, host: str = "localhost") -> bool:
    """
    Returns if a port is free on localhost.
    :param port: Port to be checked
    :param host:
    :return: if it's free.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, port))
            return True
    except OSError:
        return False


def get_valid_port(preferred: int = Constants.DEFAULT_PORT,
                   lower_bound: int = 1024, upper_bound: int = 65535) -> int:
    """
    Returns the preferred port if it is free on localhost, otherwise random ports in range are tried.
    """
    if lower_bound > upper_bound:
        raise ValueError("Port lower bound cannot be greater than port upper bound.")

    port = preferred
    for _ in range(Constants.MAX_PORT_RETRIES):
        if port_is_free(port):
            return port
        logger.debug(f"Port {port} is taken.")
        port = random.randint(lower_bound, upper_bound)
    raise OSError(f"No free port found after {Constants.MAX_PORT_RETRIES} attempts.")


def format_registry(peers: list[str], files: dict[str, str]) -> str:
    """
    Returns the node's status as printed after every handled connection.
    """
    lines = ["Peers List:"]
    lines.extend(peers)
    lines.append("")
    lines.append("Available Files:")
    lines.extend(f"{filename} ({address})" for filename, address in files.items())
    return "\n".join(lines)
