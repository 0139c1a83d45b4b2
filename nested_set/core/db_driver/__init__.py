"""
Database driver factory and registry.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import logging
from typing import Any, Dict, List, Type

from .base import BaseDatabaseDriver
from .exceptions import (
    DriverConnectionError,
    DriverError,
    DriverNotFoundError,
    DriverOperationError,
    TransactionError,
)
from .sqlite import SQLiteDriver

logger = logging.getLogger(__name__)

# Driver registry
_DRIVERS: Dict[str, Type[BaseDatabaseDriver]] = {
    "sqlite": SQLiteDriver,
}


def register_driver(name: str, driver_class: Type[BaseDatabaseDriver]) -> None:
    """
    Register a new database driver.

    Args:
        name: Driver name
        driver_class: Driver class (subclass of BaseDatabaseDriver)
    """
    if not issubclass(driver_class, BaseDatabaseDriver):
        raise TypeError("Driver class must be a subclass of BaseDatabaseDriver")
    _DRIVERS[name] = driver_class
    logger.info(f"Registered database driver: {name}")


def create_driver(driver_name: str, config: Dict[str, Any]) -> BaseDatabaseDriver:
    """
    Create and connect a database driver.

    Args:
        driver_name: Name of the driver (e.g., 'sqlite')
        config: Driver-specific configuration

    Returns:
        Connected driver instance

    Raises:
        DriverNotFoundError: If driver name is not registered
        DriverConnectionError: If the driver cannot connect
    """
    if driver_name not in _DRIVERS:
        available = ", ".join(_DRIVERS.keys())
        logger.error(f"Unknown driver: {driver_name}, available: {available}")
        raise DriverNotFoundError(
            f"Unknown database driver: {driver_name}. "
            f"Available drivers: {available}"
        )

    driver = _DRIVERS[driver_name]()
    driver.connect(config)
    logger.debug(f"Database driver '{driver_name}' initialized")
    return driver


def get_available_drivers() -> List[str]:
    """
    Get list of available driver names.

    Returns:
        List of driver names
    """
    return list(_DRIVERS.keys())


__all__ = [
    "BaseDatabaseDriver",
    "SQLiteDriver",
    "DriverError",
    "DriverConnectionError",
    "DriverOperationError",
    "DriverNotFoundError",
    "TransactionError",
    "create_driver",
    "register_driver",
    "get_available_drivers",
]
