import unittest
from unittest import mock

import cli
import ui_helpers
from p2p_registry.constants import Constants
from p2p_registry.node import Node


class TerminalTests(unittest.TestCase):

    def test_defaults(self):
        args = ui_helpers.handle_terminal([])
        self.assertEqual(args.port, Constants.DEFAULT_PORT)
        self.assertFalse(args.use_global_ip)
        self.assertIsNone(args.bootstrap)
        self.assertFalse(args.verbose)

    def test_flags(self):
        args = ui_helpers.handle_terminal(["--port", "9000", "-v", "--bootstrap", "10.0.0.1:7124"])
        self.assertEqual(args.port, 9000)
        self.assertTrue(args.verbose)
        self.assertEqual(args.bootstrap, "10.0.0.1:7124")


class OurIPTests(unittest.TestCase):

    def test_local_ip(self):
        self.assertEqual(ui_helpers.get_our_ip(False), Constants.DEFAULT_HOST)

    def test_global_ip(self):
        with mock.patch("ui_helpers.get") as get:
            get.return_value.content = b"203.0.113.5\n"
            self.assertEqual(ui_helpers.get_our_ip(True), "203.0.113.5")
        get.assert_called_once_with(Constants.GLOBAL_IP_URL, timeout=Constants.REQUEST_TIMEOUT_SEC)


class MenuTests(unittest.TestCase):

    def test_duplicate_option(self):
        menu = cli.GenericMenu()
        menu.add_option("Back", lambda: None)
        with self.assertRaises(ValueError):
            menu.add_option("Back", lambda: None)

    def test_choice_runs_option(self):
        chosen = []
        menu = cli.GenericMenu()
        menu.add_option("First", lambda: chosen.append(1))
        menu.add_option("Second", lambda: chosen.append(2))
        with mock.patch("builtins.input", side_effect=["x", "3", "2"]), mock.patch("builtins.print"):
            menu.display_all()
        self.assertEqual(chosen, [2])

    def test_view_files(self):
        node = Node("127.0.0.1", 7124)
        node.storage.add_file("movie.mp4", "10.0.0.1:5000")
        menu = cli.MainMenu(node)
        with mock.patch("builtins.print") as printed:
            menu.view_files()
        printed.assert_called_once_with("movie.mp4 (10.0.0.1:5000)")

    def test_leave_stops_menu(self):
        menu = cli.MainMenu(Node("127.0.0.1", 7124))
        with mock.patch("builtins.input", return_value="6"), mock.patch("builtins.print"):
            menu.run()
        self.assertFalse(menu.running)


if __name__ == '__main__':
    unittest.main()
