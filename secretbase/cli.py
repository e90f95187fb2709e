import argparse
import shlex
import sqlite3
import sys
import logging
from getpass import getpass

from . import __version__
from . import db
from . import store
from . import sync
from . import template
from .errors import ConfigError, SecretbaseError
from .utils import current_dir_name, print_table

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")


def cmd_start(session, args):
    if session.interactive:
        print("SecretBase CLI is already running.")
        return
    session.interactive = True
    parser = build_parser()
    while True:
        try:
            line = input("sbx> ").strip()
        except EOFError:
            line = "exit"
        if line in EXIT_WORDS:
            print("Exiting SecretBase CLI...")
            session.interactive = False
            break
        if not line:
            continue
        try:
            run(parser, shlex.split(line), session)
        except ValueError as e:
            print(f"Error: {e}")
        except SystemExit:
            # argparse already printed the usage error
            continue


def cmd_create(session, args):
    name = session.project_name(args.name)
    store.create_project(session.conn, name)
    print("Project and associated environments created successfully")


def cmd_register(session, args):
    password = args.password or getpass("Password (input hidden): ")
    if not args.email or not password:
        raise SystemExit("Email and password are required")
    store.create_user(session.conn, args.email, password, args.admin)
    print("User created successfully")


def cmd_projects(session, args):
    rows = store.list_projects(session.conn)
    print_table(["Project Name", "Active"], [(n, "Yes" if a else "No") for n, a in rows])


def cmd_users(session, args):
    rows = store.list_users(session.conn)
    print_table(["Email", "Admin"], [(e, "Yes" if a else "No") for e, a in rows])


def cmd_secrets(session, args):
    project = session.project_name(args.project)
    store.require_project(session.conn, project)
    secrets = store.list_secrets(session.conn, project, args.environment)
    print_table(["Key", "Value"], [(s.key, s.value) for s in secrets])


def cmd_grab(session, args):
    project = session.project_name(args.project)
    store.require_project(session.conn, project)
    written = sync.grab(session.conn, project, args.environment, session.root)
    if not written:
        print(f"No {args.environment} secrets stored for project '{project}'.")


def cmd_share(session, args):
    project = session.project_name(args.project)
    store.require_project(session.conn, project)
    if args.secret:
        sync.share_single(session.conn, project, args.environment, args.secret)
    else:
        sync.share_directory(session.conn, project, args.environment, session.root)


def cmd_setup(session, args):
    print("Operating in directory:", current_dir_name(session.root))
    template.setup(session.root)


def cmd_version(session, args):
    print(f"SecretBase version {__version__}")


def add_environment_flags(s, staging_flag: str):
    group = s.add_mutually_exclusive_group(required=True)
    group.add_argument("-d", "--dev", dest="environment", action="store_const",
                       const=db.ENVIRONMENT_TYPES[0], help="Development environment")
    group.add_argument(staging_flag, "--staging", dest="environment", action="store_const",
                       const=db.ENVIRONMENT_TYPES[1], help="Staging environment")
    group.add_argument("-r", "--prod", dest="environment", action="store_const",
                       const=db.ENVIRONMENT_TYPES[2], help="Production environment")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sbx",
                                     description="Manage environment variables for projects across environments")
    parser.add_argument("--db", help=f"Path to SQLite DB (or set SECRETBASE_DB). Default: {db.DEFAULT_DB}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    # start
    s = sub.add_parser("start", help="Start the interactive CLI")
    s.set_defaults(func=cmd_start)

    # create
    s = sub.add_parser("create", help="Create a project with development, staging and production environments")
    s.add_argument("-n", "--name", help="Project name (default: current directory name)")
    s.set_defaults(func=cmd_create)

    # register
    s = sub.add_parser("register", help="Register a new user")
    s.add_argument("-e", "--email", required=True)
    s.add_argument("-p", "--password", help="Prompted for when omitted")
    s.add_argument("-a", "--admin", action="store_true", help="Set user as admin")
    s.set_defaults(func=cmd_register)

    # projects
    s = sub.add_parser("projects", help="List all projects")
    s.set_defaults(func=cmd_projects)

    # users
    s = sub.add_parser("users", help="List all users")
    s.set_defaults(func=cmd_users)

    # secrets
    s = sub.add_parser("secrets", help="Show secrets for an environment")
    s.add_argument("-p", "--project")
    add_environment_flags(s, "-s")
    s.set_defaults(func=cmd_secrets)

    # grab
    s = sub.add_parser("grab", help="Write stored secrets to .env files")
    s.add_argument("-p", "--project")
    add_environment_flags(s, "-s")
    s.set_defaults(func=cmd_grab)

    # share
    s = sub.add_parser("share", help="Push .env files (or one key=value) to the store")
    s.add_argument("-p", "--project")
    add_environment_flags(s, "-g")
    s.add_argument("-s", "--secret", help="Single key=value pair to add or update")
    s.set_defaults(func=cmd_share)

    # setup
    s = sub.add_parser("setup", help="Create or update .env.example files from .env files")
    s.set_defaults(func=cmd_setup)

    # version
    s = sub.add_parser("version", help="Show version information")
    s.set_defaults(func=cmd_version)

    return parser


def run(parser: argparse.ArgumentParser, argv: list[str], session) -> int:
    """Parse ``argv`` and run the command in ``session``.

    Command errors are reported on stderr and turned into exit status 1.
    """
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    logger.debug("Running command %s", args.command)
    try:
        args.func(session, args)
    except ConfigError:
        raise
    except SecretbaseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except sqlite3.Error as e:
        print(f"Database error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 1
    except SystemExit as e:
        if not session.interactive:
            raise
        print(e, file=sys.stderr)
        return 1
    return 0
