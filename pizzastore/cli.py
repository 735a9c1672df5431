import inspect
import sys
from typing import Callable

from termcolor import cprint, colored

from .accounts import AccountManager, Role, ASSIGNABLE_ROLES
from .helpers import parse_boolean_input

# any logged-in user
LOGGED_IN = ASSIGNABLE_ROLES

# command infrastructure
class Command:
    """bind a command name to a function and the roles allowed to run it (none = no login needed)"""
    def __init__(self, name: str, function: Callable, description: str,
                 roles: tuple[Role, ...] | None = LOGGED_IN):
        self.name = name
        self._fn = function
        self.description = description
        self.roles = roles

    def params(self) -> list[inspect.Parameter]:
        return list(inspect.signature(self._fn).parameters.values())

    def execute(self, tokens: list[str]):
        """validate arg count and invoke function"""
        params = self.params()
        required = sum(
            p.default is inspect.Parameter.empty and p.kind in (
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
                inspect.Parameter.POSITIONAL_ONLY
            )
            for p in params
        )
        if not (required <= len(tokens) <= len(params)):
            cprint(f"invalid args for '{self.name}' (expected {required}-{len(params)}, got {len(tokens)})", "red")
            return
        return self._fn(*tokens)

class CommandParser:
    """simple repl parser"""
    def __init__(self, account_manager: AccountManager):
        self.account_manager = account_manager
        self.commands: list[Command] = [
            Command("help", self.show_help, "show this help", None),
            Command("h", self.show_help, "alias help", None),
            Command("quit", self.quit, "exit program", None),
            Command("exit", lambda: cprint("use quit to exit", "yellow"), "alias quit", None),
        ]

    def _find(self, tokens: list[str]) -> Command | None:
        """longest command name matching the start of tokens"""
        matches = [c for c in self.commands if tokens[:len(c.name.split())] == c.name.split()]
        return max(matches, key=lambda c: len(c.name.split()), default=None)

    def allowed(self, cmd: Command) -> bool:
        return cmd.roles is None or self.account_manager.has_role(*cmd.roles)

    def parse_and_execute(self, input_str: str):
        """parse the raw input string and attempt to execute a command"""
        tokens = input_str.strip().split()
        if not tokens:
            return
        cmd = self._find(tokens)
        if cmd is None:
            cprint("unknown command. type 'help'", "red"); return
        if cmd.roles is not None and self.account_manager.current_login is None:
            cprint("please login/register first", "yellow")
            self.account_manager.register_or_login()
            print("\n")
        if cmd.roles is not None and self.account_manager.current_login is None:
            cprint("authentication required", "red"); return
        if not self.allowed(cmd):
            cprint("insufficient privileges", "red"); return
        args = tokens[len(cmd.name.split()):]
        return cmd.execute(args)

    def show_help(self):
        """display help with the commands available to the current user"""
        cprint("available commands:", "green", attrs=["bold"])
        width = max(len(c.name) for c in self.commands)
        for cmd in self.commands:
            if self.account_manager.current_login is not None and not self.allowed(cmd):
                continue
            params = " ".join(
                f"<{p.name}>" if p.default is inspect.Parameter.empty else f"[{p.name}]"
                for p in cmd.params()
            )
            line = f"{colored(cmd.name,'blue')} {colored(params,'cyan')}".strip()
            print(line.ljust(width + 25), "-", cmd.description)

    @staticmethod
    def quit():
        """interactive quit confirmation"""
        ans = input(colored("are you sure you want to quit? (y/N): ", "yellow"))
        if parse_boolean_input(ans):
            sys.exit(0)
        cprint("continuing...", "green")

    def start_repl(self):
        """main repl loop"""
        while True:
            try:
                user_input = input(colored("\n> ", "blue")).strip()
            except EOFError:
                print()
                break
            if user_input:
                self.parse_and_execute(user_input)
