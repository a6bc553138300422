from typing import Any, Dict, Optional


class ErrorCode:
    """Standard error codes for the funding run"""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNKNOWN_NETWORK = "UNKNOWN_NETWORK"
    RPC_ERROR = "RPC_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"


class GasFunderError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(GasFunderError):
    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            details=details,
        )


class UnknownNetworkError(GasFunderError):
    def __init__(self, network: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.UNKNOWN_NETWORK,
            message=f"Unknown network: {network}",
            details={"network": network, **(details or {})},
        )
        self.network = network


class NodeError(GasFunderError):
    """An RPC call against the node failed. Never retried."""

    def __init__(self, operation: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.RPC_ERROR,
            message=f"{operation} failed: {message}",
            details={"operation": operation, **(details or {})},
        )
        self.operation = operation


class TransactionFailedError(NodeError):
    def __init__(self, tx_hash: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            operation="wait_for_receipt",
            message=f"transaction {tx_hash} reverted",
            details={"tx_hash": tx_hash, **(details or {})},
        )
        self.code = ErrorCode.TRANSACTION_FAILED
        self.tx_hash = tx_hash
