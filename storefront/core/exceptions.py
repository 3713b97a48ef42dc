"""
Storefront Exception Hierarchy

Structured exception classes for plugins and directory services.
All exceptions include code, message, and details for logging and debugging.

Exception Hierarchy:
    StorefrontError
    ├── ConfigurationError            (hard faults, request ends with a 500)
    │   ├── MeasureNotFoundError
    │   ├── CurrencyNotFoundError
    │   └── ExchangeRateError
    ├── PluginError
    │   └── PluginNotFoundError
    ├── ShippingError
    │   └── CarrierAPIError
    └── PaymentError
        └── PaymentGatewayError
"""
from typing import Optional, Dict, Any


class StorefrontError(Exception):
    """
    Base exception for all storefront custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "STOREFRONT_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# CONFIGURATION / DIRECTORY DATA ERRORS
# =============================================================================

class ConfigurationError(StorefrontError):
    """Required reference data or configuration is missing."""
    default_code = "CONFIGURATION_ERROR"
    default_severity = "P1"


class MeasureNotFoundError(ConfigurationError):
    """A measure weight/dimension could not be loaded by system keyword."""
    default_code = "MEASURE_NOT_FOUND"

    def __init__(self, message: str, system_keyword: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["system_keyword"] = system_keyword
        super().__init__(message, details=details, **kwargs)


class CurrencyNotFoundError(ConfigurationError):
    """A currency could not be loaded by ISO code."""
    default_code = "CURRENCY_NOT_FOUND"

    def __init__(self, message: str, currency_code: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["currency_code"] = currency_code
        super().__init__(message, details=details, **kwargs)


class ExchangeRateError(ConfigurationError):
    """A currency or measure has no usable exchange ratio."""
    default_code = "EXCHANGE_RATE_NOT_SET"


# =============================================================================
# PLUGIN ERRORS
# =============================================================================

class PluginError(StorefrontError):
    """Base exception for plugin registry errors."""
    default_code = "PLUGIN_ERROR"


class PluginNotFoundError(PluginError):
    """No plugin registered under the requested system name."""
    default_code = "PLUGIN_NOT_FOUND"
    default_severity = "P3"

    def __init__(self, message: str, system_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["system_name"] = system_name
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(StorefrontError):
    """Base exception for shipping-related errors."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P1"


class CarrierAPIError(ShippingError):
    """
    Carrier web service call failed.

    message carries the carrier's own error text so it can be shown
    to the customer as the shipping response error.
    """
    default_code = "CARRIER_API_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# PAYMENT ERRORS
# =============================================================================

class PaymentError(StorefrontError):
    """Base exception for payment processing errors."""
    default_code = "PAYMENT_ERROR"
    default_severity = "P0"  # Payment errors are always critical


class PaymentGatewayError(PaymentError):
    """Payment gateway call failed or returned an error."""
    default_code = "PAYMENT_GATEWAY_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
