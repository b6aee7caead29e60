"""Configuration module for udp-node."""
import os
import logging

# --- Configuration ---
LISTEN_PORT = int(os.getenv('LISTEN_PORT', 3490))
LISTEN_FAMILY = os.getenv('LISTEN_FAMILY', 'ipv6')

MAX_MESSAGE_SIZE = int(os.getenv('MAX_MESSAGE_SIZE', 1024))
MAX_QUEUE_SIZE = int(os.getenv('MAX_QUEUE_SIZE', 100))
DEBUG = os.getenv('DEBUG', 'false').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Receiver service timings (seconds)
POLL_INTERVAL = float(os.getenv('POLL_INTERVAL', 0.1))
STATS_INTERVAL = float(os.getenv('STATS_INTERVAL', 300))

# --- Logging Setup ---
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger("udp-node")
