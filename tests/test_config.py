"""Unit tests for the configuration module."""
import os
from unittest.mock import patch


def test_default_configuration():
    """Test that default configuration values are set correctly."""
    # Import fresh to test defaults
    import importlib
    import udp_node.config as config_module
    importlib.reload(config_module)
    
    assert isinstance(config_module.LISTEN_PORT, int)
    assert isinstance(config_module.LISTEN_FAMILY, str)
    assert isinstance(config_module.MAX_MESSAGE_SIZE, int)
    assert isinstance(config_module.MAX_QUEUE_SIZE, int)
    assert isinstance(config_module.DEBUG, bool)
    assert isinstance(config_module.LOG_LEVEL, str)
    assert isinstance(config_module.POLL_INTERVAL, float)
    assert isinstance(config_module.STATS_INTERVAL, float)


@patch.dict(os.environ, {
    'LISTEN_PORT': '5590',
    'LISTEN_FAMILY': 'ipv4',
    'MAX_MESSAGE_SIZE': '2048',
    'MAX_QUEUE_SIZE': '5',
    'DEBUG': 'true',
    'LOG_LEVEL': 'DEBUG',
    'POLL_INTERVAL': '0.5',
    'STATS_INTERVAL': '60',
})
def test_environment_variable_override():
    """Test that environment variables override defaults."""
    import importlib
    import udp_node.config as config_module
    importlib.reload(config_module)
    
    assert config_module.LISTEN_PORT == 5590
    assert config_module.LISTEN_FAMILY == 'ipv4'
    assert config_module.MAX_MESSAGE_SIZE == 2048
    assert config_module.MAX_QUEUE_SIZE == 5
    assert config_module.DEBUG is True
    assert config_module.LOG_LEVEL == 'DEBUG'
    assert config_module.POLL_INTERVAL == 0.5
    assert config_module.STATS_INTERVAL == 60.0


@patch.dict(os.environ, {'DEBUG': 'TRUE'})
def test_debug_uppercase():
    """Test that DEBUG is case-insensitive."""
    import importlib
    import udp_node.config as config_module
    importlib.reload(config_module)
    
    assert config_module.DEBUG is True


@patch.dict(os.environ, {'DEBUG': 'invalid'})
def test_debug_invalid():
    """Test that an invalid DEBUG value defaults to false."""
    import importlib
    import udp_node.config as config_module
    importlib.reload(config_module)
    
    assert config_module.DEBUG is False


def test_logger_exists():
    """Test that logger is properly initialized."""
    from udp_node.config import logger
    
    assert logger is not None
    assert logger.name == "udp-node"
