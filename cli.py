"""
Interactive menu for running a registry node.

Usage: python cli.py [--port PORT] [--use_global_ip] [--bootstrap HOST:PORT] [--verbose]
"""
import logging
from typing import Callable

import ui_helpers
from p2p_registry.errors import RegistryError
from p2p_registry.node import Node

logger = logging.getLogger("__main__")


class GenericMenu:
    def __init__(self, title: str = "Generic Menu", parent=None, node: Node | None = None):
        self.parent: GenericMenu | None = parent
        self.title = title
        self.__options: list[dict] = []
        self.__info: list[str] = []
        if node:
            self.node: Node | None = node
        else:
            self.node: Node | None = self.parent.node if self.parent else None

    def add_option(self, name: str, command: Callable, description: str = "") -> None:
        """
        Adds an option to the menu, options are numbered in the order they are added.
        """
        if name in [option["name"] for option in self.__options]:
            raise ValueError(f"Option \"{name}\" is already in the option menu.")
        self.__options.append({"name": name, "command": command, "description": description})

    def add_info(self, info: str) -> None:
        self.__info.append(info)

    def get_input(self, prompt: str = ">> ") -> str:
        return input(prompt).strip()

    def display(self) -> None:
        print("\n\n--------", self.title, "--------\n")
        for line in self.__info:
            print(line)
        if self.__info:
            print()
        for i, option in enumerate(self.__options, start=1):
            print(f"{i}) {option['name']}")
            if option["description"]:
                print(f"    Description: {option['description']}")

    def get_choice(self) -> int:
        while True:
            choice = input("Choice: ")
            if not choice.isnumeric():
                print("Choice was not a number, please try again.")
            elif not 1 <= int(choice) <= len(self.__options):
                print("Choice out of range, please try again.")
            else:
                return int(choice)

    def display_all(self) -> None:
        """Shows the menu, then runs the chosen option."""
        if not self.__options:
            raise ValueError("There are no choices to be made - no options!")
        self.display()
        self.__options[self.get_choice() - 1]["command"]()


class MainMenu(GenericMenu):
    def __init__(self, node: Node):
        GenericMenu.__init__(self, title="Main Menu", node=node)
        self.running = True
        self.add_info(f"Our address: {node.address}")
        self.add_option("Join network", self.join_network, "Join through a peer already on the network.")
        self.add_option("Share file", self.share_file, "Tell every peer a file is available here.")
        self.add_option("Withdraw file", self.unshare_file, "Tell every peer a file is no longer here.")
        self.add_option("View peers", self.view_peers)
        self.add_option("View files", self.view_files)
        self.add_option("Leave network and exit", self.leave)

    def run(self) -> None:
        while self.running:
            self.display_all()

    def join_network(self) -> None:
        address = self.get_input("Bootstrap peer as host:port (Leave blank to go back): ")
        if not address:
            return
        try:
            snapshot = self.node.join(address)
            logger.info(f"Joined network, {len(snapshot['peers'])} other peer(s) "
                        f"and {len(snapshot['files'])} file(s) known.")
        except RegistryError as e:
            logger.error(f"Could not join through {address}: {e}")

    def share_file(self) -> None:
        filename = self.get_input("Filename to share (Leave blank to go back): ")
        if not filename:
            return
        try:
            failed = self.node.share_file(filename)
        except RegistryError as e:
            logger.error(str(e))
            return
        logger.info(f"Shared {filename}, {len(failed)} peer(s) could not be told.")

    def unshare_file(self) -> None:
        filename = self.get_input("Filename to withdraw (Leave blank to go back): ")
        if not filename:
            return
        if not self.node.storage.contains_file(filename):
            logger.warning(f"{filename} is not in the file registry.")
        try:
            failed = self.node.unshare_file(filename)
        except RegistryError as e:
            logger.error(str(e))
            return
        logger.info(f"Withdrew {filename}, {len(failed)} peer(s) could not be told.")

    def view_peers(self) -> None:
        peers = self.node.storage.get_peers()
        if not peers:
            print("No peers known.")
        for peer in peers:
            print(peer)

    def view_files(self) -> None:
        files = self.node.storage.get_files()
        if not files:
            print("No files known.")
        for filename, address in files.items():
            print(f"{filename} ({address})")

    def leave(self) -> None:
        self.node.leave()
        self.running = False


def main(argv: list[str] | None = None) -> None:
    args = ui_helpers.handle_terminal(argv)
    main_logger = ui_helpers.create_logger(args.verbose)

    node, server, server_thread = ui_helpers.initialise_node(args.port, args.use_global_ip, main_logger)
    try:
        if args.bootstrap:
            try:
                node.join(args.bootstrap)
            except RegistryError as e:
                main_logger.error(f"Could not join through {args.bootstrap}: {e}")
        MainMenu(node).run()
    except (KeyboardInterrupt, EOFError):
        main_logger.info("Interrupted, leaving the network.")
        node.leave()
    finally:
        server.thread_stop(server_thread)


if __name__ == "__main__":
    main()
