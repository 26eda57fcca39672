"""Entry point for lexidrill CLI client."""

import argparse
import sys

from cli.api_client import LexidrillAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Lexidrill - adaptive vocabulary drill')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    args = parser.parse_args()

    client = LexidrillAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
