"""Receiver service: runs an endpoint and logs what arrives."""
import asyncio
import signal
from .config import (
    logger, LISTEN_PORT, LISTEN_FAMILY, MAX_MESSAGE_SIZE, MAX_QUEUE_SIZE,
    DEBUG, POLL_INTERVAL, STATS_INTERVAL,
)
from .endpoint import DatagramEndpoint
from .protocol import WireDatagram
from .resolver import AddressFamily


def format_datagram(datagram: WireDatagram) -> str:
    """Render a datagram the way the receiver logs it."""
    return (
        f"[{datagram.source_address}]:{datagram.source_port} "
        f"time={datagram.timestamp} crc={datagram.checksum} "
        f"({'valid' if datagram.is_valid() else 'invalid'}) "
        f"msg={datagram.text!r}"
    )


async def drain_task(endpoint: DatagramEndpoint, interval: float = POLL_INTERVAL):
    """
    Periodically drains the endpoint's queue and logs each datagram.
    
    Args:
        endpoint: Running endpoint to drain
        interval: Seconds to sleep between drains
    """
    while True:
        for datagram in endpoint.queue.drain():
            logger.info(format_datagram(datagram))
        await asyncio.sleep(interval)


async def stats_task(endpoint: DatagramEndpoint, interval: float = STATS_INTERVAL):
    """
    Periodically logs the endpoint's traffic counters.
    
    Args:
        endpoint: Endpoint whose metrics are logged
        interval: Seconds between reports
    """
    while True:
        await asyncio.sleep(interval)
        endpoint.metrics.log_stats()


async def main():
    """Main service entry point."""
    family = AddressFamily.parse(LISTEN_FAMILY)
    logger.info(f"Starting receiver on port {LISTEN_PORT} ({family.name})")

    endpoint = DatagramEndpoint(
        LISTEN_PORT,
        family,
        max_message_size=MAX_MESSAGE_SIZE,
        max_queue_size=MAX_QUEUE_SIZE,
        debug=DEBUG,
    )
    loop = asyncio.get_running_loop()

    with endpoint:
        endpoint.start()

        tasks = [
            asyncio.create_task(drain_task(endpoint)),
            asyncio.create_task(stats_task(endpoint)),
        ]

        # Graceful Shutdown handling
        stop_event = asyncio.Event()
        def signal_handler():
            logger.info("Shutdown signal received.")
            stop_event.set()

        try:
            loop.add_signal_handler(signal.SIGTERM, signal_handler)
            loop.add_signal_handler(signal.SIGINT, signal_handler)
        except NotImplementedError:
            logger.warning("Signal handlers not supported on this platform. This is expected on Windows systems.")

        await stop_event.wait()

        logger.info("Stopping receive loop...")
        # stop() blocks until the receive thread has exited
        await loop.run_in_executor(None, endpoint.stop)

        logger.info("Cancelling tasks...")
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)

        # Whatever arrived before the loop stopped
        for datagram in endpoint.queue.drain():
            logger.info(format_datagram(datagram))
