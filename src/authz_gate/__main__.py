"""
authz-gate - Entry Point

Runs the security gateway server, or writes a starter configuration.
"""

import argparse
import logging
import sys

from config import create_default_config, load_config

from .server import SecurityGatewayServer

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Privilege-based access control gateway",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a starter security.yaml
  python -m authz_gate --init-config

  # Serve with ./security.yaml (or ./config/security.yaml)
  python -m authz_gate

  # Explicit configuration and port, debug logging
  python -m authz_gate --config /etc/authz-gate/security.yaml --port 8080 --debug
"""
    )

    parser.add_argument(
        '--config', '-c',
        help='Path to security.yaml'
    )

    parser.add_argument(
        '--host',
        help='Bind address (overrides configuration)'
    )

    parser.add_argument(
        '--port', '-p',
        type=int,
        help='Listen port (overrides configuration)'
    )

    parser.add_argument(
        '--init-config',
        action='store_true',
        help='Write a default security.yaml and exit'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.init_config:
        path = create_default_config(args.config)
        print(f"Wrote {path}")
        return 0

    try:
        config = load_config(args.config)
    except (FileNotFoundError, KeyError) as e:
        logger.error(f"Could not load configuration: {e}")
        return 1

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port

    SecurityGatewayServer(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
