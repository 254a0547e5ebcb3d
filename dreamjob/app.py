import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import load_settings
from .container import Container, build_container
from .errors import ConfigError, StoreFault
from .models import User
from .schema import validate_user


def cmd_init_db(args: argparse.Namespace, container: Container) -> None:
    # Schema is created by build_container
    print(f"Database ready: {container.engine.url.render_as_string(hide_password=True)}")


def cmd_register(args: argparse.Namespace, container: Container) -> None:
    data = {"email": args.email, "name": args.name, "password": args.password}
    errors = validate_user(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(1)
    user = container.users.save(User(**data))
    if user is None:
        print(f"User with email {args.email} already exists")
        raise SystemExit(1)
    print(f"Registered user {user.id}: {user.email}")


def cmd_login(args: argparse.Namespace, container: Container) -> None:
    user = container.users.find_by_email_and_password(args.email, args.password)
    if user is None:
        print("Email or password is incorrect")
        raise SystemExit(1)
    print(f"Welcome, {user.name}")


def cmd_users(args: argparse.Namespace, container: Container) -> None:
    users = container.users.find_all()
    if not users:
        print("No users registered.")
        return
    print(f"Found {len(users)} users:\n")
    for user in users:
        print(f"ID: {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Name: {user.name}")
        print()


def cmd_delete_user(args: argparse.Namespace, container: Container) -> None:
    if not container.users.delete_by_email(args.email):
        print(f"User with email {args.email} not found")
        raise SystemExit(1)
    print(f"Deleted user {args.email}")


def cmd_candidates(args: argparse.Namespace, container: Container) -> None:
    cities = {c.id: c.name for c in container.cities.find_all()}
    for c in container.candidates.find_all():
        print(f"{c.id}. {c.name} ({cities.get(c.city_id, 'unknown')}) created {c.creation_date:%Y-%m-%d %H:%M}")


def cmd_vacancies(args: argparse.Namespace, container: Container) -> None:
    cities = {c.id: c.name for c in container.cities.find_all()}
    for v in container.vacancies.find_all():
        if not v.visible and not args.all:
            continue
        print(f"{v.id}. {v.title} ({cities.get(v.city_id, 'unknown')}) created {v.creation_date:%Y-%m-%d %H:%M}")


def cmd_cities(args: argparse.Namespace, container: Container) -> None:
    for c in container.cities.find_all():
        print(f"{c.id}. {c.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dreamjob", description="Dream Job - job board store CLI")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the users table if missing")
    ini.set_defaults(func=cmd_init_db)

    reg = subparsers.add_parser("register", help="Register a new user")
    reg.add_argument("--email", required=True, help="Unique, case-sensitive email")
    reg.add_argument("--name", required=True, help="Display name")
    reg.add_argument("--password", required=True, help="Password")
    reg.set_defaults(func=cmd_register)

    lgn = subparsers.add_parser("login", help="Check a user's email and password")
    lgn.add_argument("--email", required=True)
    lgn.add_argument("--password", required=True)
    lgn.set_defaults(func=cmd_login)

    usr = subparsers.add_parser("users", help="List registered users")
    usr.set_defaults(func=cmd_users)

    dlu = subparsers.add_parser("delete-user", help="Delete a user by email")
    dlu.add_argument("--email", required=True)
    dlu.set_defaults(func=cmd_delete_user)

    cnd = subparsers.add_parser("candidates", help="List candidates")
    cnd.set_defaults(func=cmd_candidates)

    vac = subparsers.add_parser("vacancies", help="List visible vacancies")
    vac.add_argument("--all", action="store_true", help="Include hidden vacancies")
    vac.set_defaults(func=cmd_vacancies)

    cty = subparsers.add_parser("cities", help="List cities")
    cty.set_defaults(func=cmd_cities)
    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        raise SystemExit(2)

    try:
        container = build_container(settings)
    except StoreFault as e:
        print(f"Store unavailable: {e}", file=sys.stderr)
        raise SystemExit(2)

    try:
        args.func(args, container)
    except StoreFault as e:
        print(f"Store unavailable: {e}", file=sys.stderr)
        raise SystemExit(2)
    finally:
        container.close()


if __name__ == "__main__":
    main()
