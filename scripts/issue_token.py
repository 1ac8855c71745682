"""Issue a bearer token for a user id (local development).

Usage:
    python scripts/issue_token.py --user-id user123
    python scripts/issue_token.py --user-id user123 --minutes 60
"""
import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from clockistry.utils.auth import create_access_token


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Issue a bearer token for a user")
    parser.add_argument(
        "--user-id",
        required=True,
        help="Opaque user ID to put in the token",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to JWT_EXPIRATION_MINUTES)",
    )

    args = parser.parse_args()

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(user_id=args.user_id, expires_delta=expires))


if __name__ == "__main__":
    main()
