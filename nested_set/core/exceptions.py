"""
Base exception hierarchy for nested set operations.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""


class NestedSetError(Exception):
    """Base exception for nested set operations."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            code: Optional error code for programmatic handling
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class InvalidStateError(NestedSetError):
    """Raised when a node is not persisted or carries no bounds."""

    def __init__(self, message: str, node_id=None, details: dict = None):
        """
        Initialize invalid state error.

        Args:
            message: Error message
            node_id: Optional identifier of the offending node
            details: Optional additional details
        """
        super().__init__(message, code="INVALID_STATE", details=details)
        self.node_id = node_id


class InvalidArgumentError(NestedSetError):
    """Raised when a move position is not one of child, left, right."""

    def __init__(self, message: str, argument: str = None, details: dict = None):
        """
        Initialize invalid argument error.

        Args:
            message: Error message
            argument: Optional name of the argument that failed validation
            details: Optional additional details
        """
        super().__init__(message, code="INVALID_ARGUMENT", details=details)
        self.argument = argument


class UnresolvedTargetError(NestedSetError):
    """Raised when a move target cannot be found."""

    def __init__(self, message: str, position: str = None, details: dict = None):
        """
        Initialize unresolved target error.

        Args:
            message: Error message
            position: Requested move position
            details: Optional additional details
        """
        super().__init__(message, code="UNRESOLVED_TARGET", details=details)
        self.position = position


class InvalidMoveError(NestedSetError):
    """Raised when a move would target the node itself or its own subtree."""

    def __init__(
        self, message: str, node_id=None, target_id=None, details: dict = None
    ):
        """
        Initialize invalid move error.

        Args:
            message: Error message
            node_id: Identifier of the node being moved
            target_id: Identifier of the rejected target
            details: Optional additional details
        """
        super().__init__(message, code="INVALID_MOVE", details=details)
        self.node_id = node_id
        self.target_id = target_id


class ConfigurationError(NestedSetError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str = None, details: dict = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Optional configuration key that is invalid
            details: Optional additional details
        """
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)
        self.config_key = config_key
