from dataclasses import dataclass


@dataclass
class Constants:
    # Request type bytes, the first byte of every request.
    ADD_PEER_REQUEST = b"A"
    REMOVE_PEER_REQUEST = b"R"
    ADD_FILE_REQUEST = b"F"
    REMOVE_FILE_REQUEST = b"f"

    LENGTH_PREFIX_BYTES = 1
    MAX_STRING_SIZE = 255  # largest value a single length byte can hold
    MAX_LIST_SIZE = 255  # same limit for the peer and file counts in an add-peer reply

    STRING_ENCODING = "utf-8"
    STRING_ERRORS = "surrogateescape"  # keeps arbitrary received bytes round-trippable

    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 7124
    MAX_PORT_RETRIES = 100
    REQUEST_TIMEOUT_SEC = 5  # client side only, the server never times out a connection
    LISTEN_BACKLOG = 5

    LOG_FILE = "p2p_registry.log"
    GLOBAL_IP_URL = "https://api.ipify.org"
