from enum import Enum
from typing import TypedDict

from p2p_registry.constants import Constants


class RequestType(Enum):
    """
    The four requests a connecting peer may make, valued by the byte that starts the request.
    """
    ADD_PEER = Constants.ADD_PEER_REQUEST
    REMOVE_PEER = Constants.REMOVE_PEER_REQUEST
    ADD_FILE = Constants.ADD_FILE_REQUEST
    REMOVE_FILE = Constants.REMOVE_FILE_REQUEST

    @property
    def has_filename(self) -> bool:
        return self in (RequestType.ADD_FILE, RequestType.REMOVE_FILE)


class RegistrySnapshot(TypedDict):
    """
    Has elements: peers, files.
    What an add-peer reply carries, and what a node merges when it joins.
    """
    peers: list[str]
    files: dict[str, str]
