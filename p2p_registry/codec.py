"""
Byte-level framing for the registry protocol.

Every string on the wire is one unsigned length byte followed by that many raw bytes. Requests start with a
single request-type byte, then the sender's listening port as a string, then (for file requests) a filename.
The only reply, to an add-peer request, is a counted list of peers followed by a counted list of
(filename, owner) pairs.

Streams are binary file-like objects: anything with read(n) and write(data), such as socket.makefile()
or io.BytesIO.
"""
import struct
from typing import BinaryIO, Optional

from p2p_registry.constants import Constants
from p2p_registry.dictionaries import RequestType
from p2p_registry.errors import StringTooLongError, TooManyEntriesError, TransportError, UnknownRequestError

LENGTH_FORMAT = "!B"


def read_exactly(stream: BinaryIO, size: int) -> bytes:
    """
    Blocks until exactly size bytes have been read from the stream.
    :param stream:
    :param size:
    :return:
    """
    data = b""
    while len(data) < size:
        try:
            chunk = stream.read(size - len(data))
        except OSError as error:
            raise TransportError(f"Error reading from stream: {error}") from error
        if not chunk:
            raise TransportError(f"Stream closed after {len(data)} of {size} bytes.")
        data += chunk
    return data


def write(stream: BinaryIO, data: bytes) -> None:
    try:
        stream.write(data)
        stream.flush()
    except OSError as error:
        raise TransportError(f"Error writing to stream: {error}") from error


def encode_length(length: int) -> bytes:
    return struct.pack(LENGTH_FORMAT, length)


def read_length(stream: BinaryIO) -> int:
    return struct.unpack(LENGTH_FORMAT, read_exactly(stream, Constants.LENGTH_PREFIX_BYTES))[0]


def encode_string(value: str) -> bytes:
    """
    Encodes a string as a length byte followed by its bytes.
    :param value:
    :return:
    """
    raw = value.encode(Constants.STRING_ENCODING, Constants.STRING_ERRORS)
    if len(raw) > Constants.MAX_STRING_SIZE:
        raise StringTooLongError(
            f"String is {len(raw)} bytes long, the limit is {Constants.MAX_STRING_SIZE}: {value[:32]!r}..."
        )
    return encode_length(len(raw)) + raw


def read_string(stream: BinaryIO) -> str:
    length = read_length(stream)
    raw = read_exactly(stream, length)
    return raw.decode(Constants.STRING_ENCODING, Constants.STRING_ERRORS)


def read_request_type(stream: BinaryIO) -> RequestType:
    request_byte = read_exactly(stream, 1)
    try:
        return RequestType(request_byte)
    except ValueError as error:
        raise UnknownRequestError(request_byte) from error


def read_address(stream: BinaryIO, host: str) -> str:
    """
    Reads the sender's listening port from the stream, the host comes from the connection itself
    because the port the sender connected from is not the one it listens on.
    :param stream:
    :param host: Remote address of the connection.
    :return: "host:port"
    """
    port = read_string(stream)
    address = f"{host}:{port}"
    # The address is sent back in add-peer replies, so it must fit behind a length byte too.
    size = len(address.encode(Constants.STRING_ENCODING, Constants.STRING_ERRORS))
    if size > Constants.MAX_STRING_SIZE:
        raise StringTooLongError(
            f"Address from {host} is {size} bytes long, the limit is {Constants.MAX_STRING_SIZE}."
        )
    return address


def _encode_count(count: int, what: str) -> bytes:
    if count > Constants.MAX_LIST_SIZE:
        raise TooManyEntriesError(f"Cannot send {count} {what}, the limit is {Constants.MAX_LIST_SIZE}.")
    return struct.pack(LENGTH_FORMAT, count)


def encode_peer_list(peers: list[str]) -> bytes:
    encoded = [_encode_count(len(peers), "peers")]
    for peer in peers:
        encoded.append(encode_string(peer))
    return b"".join(encoded)


def encode_file_list(files: dict[str, str]) -> bytes:
    encoded = [_encode_count(len(files), "files")]
    for filename, address in files.items():
        encoded.append(encode_string(filename))
        encoded.append(encode_string(address))
    return b"".join(encoded)


def read_peer_list(stream: BinaryIO) -> list[str]:
    count = read_length(stream)
    return [read_string(stream) for _ in range(count)]


def read_file_list(stream: BinaryIO) -> dict[str, str]:
    count = read_length(stream)
    files: dict[str, str] = {}
    for _ in range(count):
        filename = read_string(stream)
        files[filename] = read_string(stream)
    return files


def encode_request(request_type: RequestType, port: str | int, filename: Optional[str] = None) -> bytes:
    """
    Builds a complete request, as a client sends it.
    :param request_type:
    :param port: Port the sender listens on.
    :param filename: Required for add-file and remove-file, must be None otherwise.
    :return:
    """
    if request_type.has_filename and filename is None:
        raise ValueError(f"{request_type.name} requests need a filename.")
    if not request_type.has_filename and filename is not None:
        raise ValueError(f"{request_type.name} requests do not take a filename.")

    encoded = request_type.value + encode_string(str(port))
    if filename is not None:
        encoded += encode_string(filename)
    return encoded
