#!/usr/bin/env python3
"""
Command line interface for securepipe.

Usage:
    securepipe generate-keys
    securepipe listen <port>
    securepipe send <host:port> <message>
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ConfigError, SecurePipeConfig
from .crypto.box import BoxError
from .crypto.keys import generate_key_pair
from .crypto.utils import EntropyError
from .channel.handshake import dial
from .channel.server import SecureServer
from .protocol.frame import FRAMING_MODES
from .transport.tcp import TransportError, listen

logger = logging.getLogger("securepipe")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(prog='securepipe',
                                     description='Authenticated-encryption echo service')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--log-level', type=str,
                        help='Logging level (default: INFO or SECUREPIPE_LOG_LEVEL)')
    parser.add_argument('--framing', choices=FRAMING_MODES,
                        help='Frame layout on the wire (default: length-prefixed)')
    
    subparsers = parser.add_subparsers(dest='command', help='Sub-commands')
    
    subparsers.add_parser('generate-keys', aliases=['g', 'gen'],
                          help='Generate and print a key pair')
    
    listen_parser = subparsers.add_parser('listen', help='Run the secure echo server')
    listen_parser.add_argument('port', type=int, help='TCP port to listen on')
    
    send_parser = subparsers.add_parser('send', help='Send one message to an echo server')
    send_parser.add_argument('address', help='Server address as host:port')
    send_parser.add_argument('message', help='Message to send')
    
    return parser


def cmd_generate_keys(args, config: SecurePipeConfig) -> int:
    key_pair = generate_key_pair()
    encoded = key_pair.to_hex()
    print(f"public:  {encoded['public']}")
    print(f"private: {encoded['private']}")
    return 0


def cmd_listen(args, config: SecurePipeConfig) -> int:
    if not 0 <= args.port <= 65535:
        logger.error(f"Invalid port: {args.port}")
        return 1
    
    listener = listen(args.port, host=config.bind_host)
    server = SecureServer(listener, config=config)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()
    return 0


def cmd_send(args, config: SecurePipeConfig) -> int:
    message = args.message.encode('utf-8')
    with dial(args.address, config) as conn:
        conn.write(message)
        reply = conn.read()
    print(reply.decode('utf-8', errors='replace'))
    return 0


COMMANDS = {
    'generate-keys': cmd_generate_keys,
    'g': cmd_generate_keys,
    'gen': cmd_generate_keys,
    'listen': cmd_listen,
    'send': cmd_send,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    
    if not args.command:
        parser.print_help()
        return 1
    
    try:
        config = SecurePipeConfig.from_env().replace(log_level=args.log_level,
                                                     framing=args.framing)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    
    try:
        return COMMANDS[args.command](args, config)
    except (TransportError, BoxError, EntropyError, ValueError) as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
