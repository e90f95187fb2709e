import sys
import logging

from .cli import build_parser, run
from .errors import ConfigError
from .session import Session
from .utils import load_config, resolve_db_path, resolve_log_level

"""
secretbase — manage .env secrets for projects across environments using:
- SQLite for storage (projects, environments, secrets, users)
- cryptography (PBKDF2) for hashing user passwords
- python-dotenv for loading ~/.secretbase/config.env
- Argparse CLI with subcommands
Features:
    start, create, register, projects, users, secrets, grab, share, setup, version
Usage examples:
    python -m secretbase create --name myapp
    python -m secretbase share --dev
    python -m secretbase share --prod --secret API_KEY=abc123
    python -m secretbase grab --staging --project myapp
    python -m secretbase secrets --dev
    python -m secretbase setup
"""

def main(argv=None):
    load_config()
    try:
        level = resolve_log_level()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    session = Session(resolve_db_path(args.db))
    try:
        with session:
            code = run(parser, sys.argv[1:] if argv is None else argv, session)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted by user.")
        sys.exit(1)
    sys.exit(code)

if __name__ == "__main__":
    main()
