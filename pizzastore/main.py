#!/usr/bin/env python3

#        _                   _
#  _ __ (_)__________ _  ___| |_ ___  _ __ ___
# | '_ \| |_  /_  / _` |/ __| __/ _ \| '__/ _ \
# | |_) | |/ / / / (_| |\__ \ || (_) | | |  __/
# | .__/|_/___/___\__,_||___/\__\___/|_|  \___| 🍕
# |_|

import argparse
import logging
import signal
import sys

from termcolor import cprint
from colorama import just_fix_windows_console as enable_windows_ansi_interpretation

from .accounts import AccountManager, RoleGate, Role
from .allocator import OrderIdAllocator, AllocatorError
from .cli import Command, CommandParser
from .config import BACKENDS, DatabaseConfig
from .database import DatabaseGateway, DatabaseError, open_gateway
from .menu import MenuManager
from .orders import OrderManager, OrderWorkflow

# fix windows terminal misinterpreting ansi escape sequences
enable_windows_ansi_interpretation()

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

def setup_logging(verbose: bool = False, log_file: str | None = None):
    """diagnostics go to stderr (and optionally a file), never into the menu output"""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pizzastore",
        description="command line front end for the pizza store database",
    )
    parser.add_argument("--backend", choices=BACKENDS, help="database backend (default: sqlite, env PIZZASTORE_BACKEND)")
    parser.add_argument("--sqlite-path", dest="sqlite_path", help="sqlite database file (env PIZZASTORE_SQLITE_PATH)")
    parser.add_argument("--host", help="postgres host (env POSTGRES_HOST)")
    parser.add_argument("--port", type=int, help="postgres port (env POSTGRES_PORT)")
    parser.add_argument("--dbname", help="postgres database name (env POSTGRES_DB)")
    parser.add_argument("--user", help="postgres user (env POSTGRES_USER)")
    parser.add_argument("--password", help="postgres password (env POSTGRES_PASSWORD)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every statement")
    parser.add_argument("--log-file", dest="log_file", help="also write logs to this file")
    parser.add_argument("command", nargs="*", help="command to run before the interactive prompt")
    return parser

# application wiring
class Application:
    """wire managers onto one gateway and build the command table"""
    def __init__(self, db: DatabaseGateway):
        self.db = db
        self.allocator = OrderIdAllocator(db)
        self.allocator.initialize()
        self.account_manager = AccountManager(db, RoleGate(db))
        self.workflow = OrderWorkflow(db, self.allocator)
        self.order_manager = OrderManager(db, self.account_manager, self.workflow)
        self.menu_manager = MenuManager(db, self.account_manager)
        self.parser = CommandParser(self.account_manager)

        am, om, mm = self.account_manager, self.order_manager, self.menu_manager

        # account commands
        self.parser.commands += [
            Command("account register", am.register, "create a customer account", None),
            Command("account login", am.login, "login", None),
            Command("account logout", am.logout, "logout", None),
            Command("account whoami", am.whoami, "current user", None),
            Command("profile view", am.view_profile, "show your profile"),
            Command("profile update", am.update_profile, "edit your password, phone or favorites"),
        ]

        # browsing and ordering
        self.parser.commands += [
            Command("menu", mm.view_menu, "browse the menu"),
            Command("stores", mm.view_stores, "list stores"),
            Command("order place", om.place_order, "place an order"),
            Command("order history", om.view_all_orders, "all order ids"),
            Command("order recent", om.view_recent_orders, "last 5 order ids"),
            Command("order info", om.view_order_info, "details of one order"),
            Command("order status", om.update_order_status, "update order status", (Role.DRIVER, Role.MANAGER)),
        ]

        # manager commands
        self.parser.commands += [
            Command("admin menu update", mm.update_menu, "add or edit a menu item", (Role.MANAGER,)),
            Command("admin user update", mm.update_user, "edit a user's role, password or phone", (Role.MANAGER,)),
        ]

    def run(self, *args: str):
        cprint("""
welcome to pizzastore 🍕
your local pizza store's ordering terminal!
    """, "green", attrs=["bold"])

        print("""place orders, browse the menu and manage the store from the command line.

for more information, type 'help' or 'h' at any time.
to exit the program, type 'quit'.""")

        if args:
            self.parser.parse_and_execute(" ".join(args))
        self.parser.start_repl()

# signal handler
class SignalHandler:
    """ctrl+c leaves through main's cleanup"""
    @staticmethod
    def sigint(_, __):
        """handle ctrl+c"""
        cprint("\nnext time, use quit!", "yellow")
        sys.exit(0)

# entry point
def main(argv: list[str] | None = None):
    """entrypoint wrapper"""
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    try:
        config = DatabaseConfig.from_args(args)
    except ValueError as e:
        cprint(f"error: {e}", "red")
        sys.exit(2)

    print(f"connecting to {config.describe()}...")
    try:
        db = open_gateway(config)
    except DatabaseError as e:
        cprint(f"error - unable to connect to database: {e}", "red")
        sys.exit(1)

    signal.signal(signal.SIGINT, SignalHandler.sigint)
    try:
        app = Application(db)
        app.run(*args.command)
    except AllocatorError as e:
        logger.critical("startup failed: %s", e)
        cprint(f"error - cannot allocate order ids: {e}", "red")
        sys.exit(1)
    finally:
        print("disconnecting from database...", end="")
        db.close()
        cprint("done\n\nbye!", "green")

if __name__ == "__main__":
    main()
