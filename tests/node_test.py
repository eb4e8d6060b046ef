import socket
import unittest

from p2p_registry.dispatcher import RequestDispatcher
from p2p_registry.errors import InvalidAddressError, TransportError
from p2p_registry.networking import RegistryServer
from p2p_registry.node import Node
from p2p_registry.storage import VirtualRegistryStorage


def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class NodeNetworkTests(unittest.TestCase):

    def setUp(self):
        self.servers = []
        self.a = self.start_node()
        self.b = self.start_node()
        self.c = self.start_node()

    def tearDown(self):
        for server, thread in self.servers:
            server.thread_stop(thread)

    def start_node(self) -> Node:
        storage = VirtualRegistryStorage()
        server = RegistryServer(("127.0.0.1", 0), RequestDispatcher(storage))
        self.servers.append((server, server.thread_start()))
        return Node("127.0.0.1", server.port, storage, timeout=5)

    def test_join_through_bootstrap(self):
        reply = self.b.join(self.a.address)
        self.assertEqual(reply, {"peers": [], "files": {}})
        self.assertEqual(self.a.storage.get_peers(), [self.b.address])
        self.assertEqual(self.b.storage.get_peers(), [self.a.address])

    def test_join_announces_to_other_peers(self):
        self.b.join(self.a.address)
        self.c.join(self.a.address)

        self.assertEqual(self.a.storage.get_peers(), [self.b.address, self.c.address])
        self.assertEqual(self.b.storage.get_peers(), [self.a.address, self.c.address])
        self.assertEqual(sorted(self.c.storage.get_peers()), sorted([self.a.address, self.b.address]))

    def test_share_and_unshare_file(self):
        self.b.join(self.a.address)
        self.c.join(self.a.address)

        self.assertEqual(self.b.share_file("movie.mp4"), [])
        for node in (self.a, self.b, self.c):
            self.assertEqual(node.storage.get_files(), {"movie.mp4": self.b.address})

        self.assertEqual(self.b.unshare_file("movie.mp4"), [])
        for node in (self.a, self.b, self.c):
            self.assertEqual(node.storage.get_files(), {})

    def test_joining_node_learns_files(self):
        self.b.join(self.a.address)
        self.b.share_file("movie.mp4")
        self.c.join(self.a.address)
        self.assertEqual(self.c.storage.get_files(), {"movie.mp4": self.b.address})

    def test_leave_removes_us_and_our_files(self):
        self.b.join(self.a.address)
        self.c.join(self.a.address)
        self.b.share_file("movie.mp4")
        self.c.share_file("song.mp3")

        self.assertEqual(self.b.leave(), [])

        self.assertEqual(self.a.storage.get_peers(), [self.c.address])
        self.assertEqual(self.a.storage.get_files(), {"song.mp3": self.c.address})
        self.assertEqual(self.c.storage.get_peers(), [self.a.address])
        self.assertEqual(self.c.storage.get_files(), {"song.mp3": self.c.address})
        self.assertEqual(self.b.storage.get_peers(), [])
        self.assertEqual(self.b.storage.get_files(), {})

    def test_unreachable_peer_is_reported(self):
        self.b.join(self.a.address)
        dead_peer = f"127.0.0.1:{closed_port()}"
        self.b.storage.add_peer(dead_peer)

        with self.assertLogs("__main__", level="WARNING"):
            failed = self.b.share_file("movie.mp4")

        self.assertEqual(failed, [dead_peer])
        self.assertEqual(self.a.storage.get_files(), {"movie.mp4": self.b.address})

    def test_unreachable_bootstrap(self):
        with self.assertRaises(TransportError):
            self.a.join(f"127.0.0.1:{closed_port()}")
        self.assertEqual(self.a.storage.get_peers(), [])


class NodeMergeTests(unittest.TestCase):

    def test_merge_skips_ourselves(self):
        node = Node("10.0.0.1", 5000)
        node.merge({"peers": ["10.0.0.2:5001", "10.0.0.1:5000"], "files": {"a.txt": "10.0.0.2:5001"}})
        self.assertEqual(node.storage.get_peers(), ["10.0.0.2:5001"])
        self.assertEqual(node.storage.get_files(), {"a.txt": "10.0.0.2:5001"})

    def test_address(self):
        self.assertEqual(Node("10.0.0.1", 5000).address, "10.0.0.1:5000")

    def test_cannot_join_ourselves(self):
        node = Node("127.0.0.1", 5000)
        with self.assertRaises(InvalidAddressError):
            node.join("127.0.0.1:5000")
        self.assertEqual(node.storage.get_peers(), [])


if __name__ == '__main__':
    unittest.main()
