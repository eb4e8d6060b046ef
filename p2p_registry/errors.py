
class RegistryError(Exception):
    pass


class TransportError(RegistryError):
    """Raised when a connection closes or resets in the middle of a read or write."""
    pass


class ProtocolError(RegistryError):
    """Raised when bytes on the wire (or about to be put on it) break the protocol framing."""
    pass


class UnknownRequestError(ProtocolError):
    """
    Raised when the first byte of a request is not one of the four request types.
    The dispatcher ignores the request when this happens, nothing is sent back.
    """

    def __init__(self, request_byte: bytes):
        super().__init__(f"Unknown request type: {request_byte!r}")
        self.request_byte = request_byte


class StringTooLongError(ProtocolError):
    """Raised when a string does not fit behind a single length byte."""
    pass


class TooManyEntriesError(ProtocolError):
    """Raised when a peer or file list has more entries than a single count byte can describe."""
    pass


class InvalidAddressError(ProtocolError):
    """Raised when a 'host:port' string cannot be split into a host and an integer port."""
    pass
