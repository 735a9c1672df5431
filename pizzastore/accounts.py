import logging
from enum import Enum

from termcolor import cprint, colored

from .database import DatabaseGateway, DatabaseError
from .helpers import parse_boolean_input

logger = logging.getLogger(__name__)

MAX_LOGIN_LENGTH = 50
MIN_PASSWORD_LENGTH = 4

class Role(Enum):
    """actor roles as stored in Users.role"""
    CUSTOMER = "customer"
    DRIVER = "driver"
    MANAGER = "manager"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> "Role":
        """exact match after trimming char(n) padding; anything else is unknown"""
        if raw is None:
            return cls.UNKNOWN
        try:
            role = cls(raw.strip().lower())
        except ValueError:
            return cls.UNKNOWN
        return role

# roles a stored user may actually hold
ASSIGNABLE_ROLES = (Role.CUSTOMER, Role.DRIVER, Role.MANAGER)
STAFF_ROLES = (Role.DRIVER, Role.MANAGER)

class RoleGate:
    """classify a login; failures fall back to unknown so privileged paths stay shut"""
    def __init__(self, db: DatabaseGateway):
        self.db = db

    def role_of(self, login: str | None) -> Role:
        if login is None:
            return Role.UNKNOWN
        try:
            row = self.db.query_one("SELECT role FROM Users WHERE login=?;", (login,))
        except DatabaseError as e:
            logger.warning("role lookup for %r failed: %s", login, e)
            return Role.UNKNOWN
        if row is None:
            return Role.UNKNOWN
        role = Role.parse(row[0])
        if role is Role.UNKNOWN:
            logger.warning("user %r has unrecognised role %r", login, row[0])
        return role

    def is_role(self, login: str | None, expected: Role) -> bool:
        return self.role_of(login) is expected

# accounts/auth
class AccountManager:
    """manage user accounts and session state"""
    def __init__(self, db: DatabaseGateway, role_gate: RoleGate | None = None):
        self.db = db
        self.role_gate = role_gate or RoleGate(db)
        self.current_login: str | None = None

    @property
    def current_role(self) -> Role:
        """role of current session user (unknown if none)"""
        return self.role_gate.role_of(self.current_login)

    def has_role(self, *roles: Role) -> bool:
        return self.current_role in roles

    def require_role(self, *roles: Role) -> bool:
        """guard for role-restricted actions"""
        if self.current_login is None:
            cprint("please login first", "red"); return False
        if not self.has_role(*roles):
            cprint(f"{' or '.join(r.value for r in roles)} privileges required", "red"); return False
        return True

    def _login(self, login: str, password: str) -> bool:
        """internal credential check"""
        try:
            row = self.db.query_one(
                "SELECT login, role FROM Users WHERE login=? AND password=?;",
                (login, password)
            )
        except DatabaseError as e:
            cprint(f"login failed: {e}", "red")
            return False
        if row is None:
            return False
        self.current_login = row[0]
        role = Role.parse(row[1])
        prefix = f"{role.value}: " if role is not Role.CUSTOMER else ""
        cprint(f"logged in as {prefix}{colored(row[0], 'yellow', attrs=['bold'])}", "green")
        logger.info("user %r logged in (%s)", row[0], role.value)
        return True

    def login(self, login: str | None = None, password: str | None = None):
        """interactive login (or non-interactive if args provided)"""
        if self.current_login is not None:
            cprint("already logged in", "yellow")
            ans = input("log out first? (y/N): ")
            if parse_boolean_input(ans):
                self.logout()
            else:
                return
        if login and password:
            if not self._login(login, password):
                cprint("invalid login or password", "red")
            return
        user = input(colored("login: ", "magenta")).strip()
        pwd = input(colored("password: ", "magenta")).strip()
        if not self._login(user, pwd):
            cprint("invalid login or password", "red")

    def logout(self):
        """log out current user"""
        if self.current_login is None:
            cprint("no user logged in", "red")
            return
        cprint(f"logged out {self.current_login}", "green")
        self.current_login = None

    def user_exists(self, login: str) -> bool:
        """check if login is taken"""
        return self.db.query_one("SELECT 1 FROM Users WHERE login=?;", (login,)) is not None

    def register(self, login: str | None = None, password: str | None = None, phone: str | None = None):
        """create a new customer account"""
        if login is None:
            login = input(colored("choose a login: ", "magenta")).strip()
        if password is None:
            password = input(colored("choose a password: ", "magenta")).strip()
        if phone is None:
            phone = input(colored("phone number: ", "magenta")).strip()
        if not login or len(login) > MAX_LOGIN_LENGTH or any(c.isspace() for c in login):
            cprint(f"login must be 1-{MAX_LOGIN_LENGTH} chars without spaces", "red"); return
        if len(password) < MIN_PASSWORD_LENGTH:
            cprint(f"password too short (min {MIN_PASSWORD_LENGTH})", "red"); return
        if not phone:
            cprint("phone number is required", "red"); return
        try:
            if self.user_exists(login):
                cprint("login already taken", "red"); return
            self.db.execute(
                "INSERT INTO Users(login, password, role, favoriteItems, phoneNum) VALUES(?,?,?,NULL,?);",
                (login, password, Role.CUSTOMER.value, phone)
            )
        except DatabaseError as e:
            cprint(f"could not create account: {e}", "red"); return
        cprint("account created", "green")

    def register_or_login(self):
        """prompt user to pick register / login"""
        ans = input(f"would you like to ({colored('r','light_blue')})egister or ({colored('l','light_blue')})ogin?: ").strip().lower()
        if ans == "r":
            self.register()
        elif ans == "l":
            self.login()
        else:
            cprint("invalid option", "red")

    def whoami(self):
        """print current user identity"""
        if self.current_login is None:
            cprint("no user currently logged in", "red"); return
        role = self.current_role
        prefix = f"{role.value}: " if role is not Role.CUSTOMER else ""
        cprint(f"you are logged in as {prefix}{colored(self.current_login,'yellow',attrs=['bold'])}", "green")

    def view_profile(self):
        """print the current user's profile"""
        try:
            row = self.db.query_one(
                "SELECT login, favoriteItems, phoneNum, role FROM Users WHERE login=?;",
                (self.current_login,)
            )
        except DatabaseError as e:
            cprint(f"could not load profile: {e}", "red"); return
        if row is None:
            cprint("profile not found", "red"); return
        cprint("profile", "green", attrs=["bold"])
        print("\tlogin:", row[0])
        print("\tfavorite items:", row[1] or "none")
        print("\tphone number:", row[2])
        print("\trole:", Role.parse(row[3]).value)

    def update_profile(self):
        """self-service edit of password, phone number or favorite items"""
        fields = {"password": "password", "phone": "phoneNum", "favorites": "favoriteItems"}
        choice = input("update which field? (password/phone/favorites): ").strip().lower()
        column = fields.get(choice)
        if column is None:
            cprint("invalid field", "red"); return
        value = input(f"new {choice}: ").strip()
        if choice == "password" and len(value) < MIN_PASSWORD_LENGTH:
            cprint(f"password too short (min {MIN_PASSWORD_LENGTH})", "red"); return
        if choice == "phone" and not value:
            cprint("phone number is required", "red"); return
        # column comes from the fixed mapping above, never from input
        try:
            self.db.execute(
                f"UPDATE Users SET {column}=? WHERE login=?;",
                (value or None, self.current_login)
            )
        except DatabaseError as e:
            cprint(f"update failed: {e}", "red"); return
        cprint(f"{choice} updated", "green")
