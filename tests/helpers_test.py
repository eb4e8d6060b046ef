import socket
import unittest

from p2p_registry import helpers
from p2p_registry.errors import InvalidAddressError


class AddressTests(unittest.TestCase):

    def test_split_address(self):
        self.assertEqual(helpers.split_address("10.0.0.1:5000"), ("10.0.0.1", 5000))

    def test_split_address_keeps_colons_in_host(self):
        self.assertEqual(helpers.split_address("::1:5000"), ("::1", 5000))

    def test_invalid_addresses(self):
        for address in ["10.0.0.1", ":5000", "10.0.0.1:port", "10.0.0.1:0", "10.0.0.1:70000"]:
            with self.subTest(address=address):
                with self.assertRaises(InvalidAddressError):
                    helpers.split_address(address)

    def test_join_address(self):
        self.assertEqual(helpers.join_address("10.0.0.1", 5000), "10.0.0.1:5000")


class PortTests(unittest.TestCase):

    def test_taken_port_is_not_free(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("localhost", 0))
            sock.listen()
            port = sock.getsockname()[1]
            self.assertFalse(helpers.port_is_free(port))
            self.assertNotEqual(helpers.get_valid_port(preferred=port), port)

    def test_bad_bounds(self):
        with self.assertRaises(ValueError):
            helpers.get_valid_port(lower_bound=6000, upper_bound=5000)


class FormatRegistryTests(unittest.TestCase):

    def test_format_registry(self):
        output = helpers.format_registry(["10.0.0.1:5000"], {"movie.mp4": "10.0.0.1:5000"})
        self.assertEqual(output, "Peers List:\n10.0.0.1:5000\n\nAvailable Files:\nmovie.mp4 (10.0.0.1:5000)")


if __name__ == '__main__':
    unittest.main()
