"""Entry point for udp-node."""
import asyncio
from .server import main as server_main

__all__ = ['main']


def main():
    """Main entry point for the udp-node console script."""
    try:
        asyncio.run(server_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
