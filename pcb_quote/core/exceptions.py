# pcb_quote/core/exceptions.py

from enum import Enum
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

class ErrorCode(Enum):
    """Standardized error codes for the quotation engine."""

    # Parameter validation errors
    INVALID_PARAMETERS = "INVALID_PARAMETERS"

    # Quotation errors
    PRICING_CALCULATION_FAILED = "PRICING_CALCULATION_FAILED"

    # Configuration errors
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # System errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

class QuoteEngineError(Exception):
    """Base exception for all quotation engine errors."""

    def __init__(
        self,
        code: ErrorCode,
        user_message: str,
        technical_details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None
    ):
        self.code = code
        self.user_message = user_message
        self.technical_details = technical_details
        self.context = context or {}
        self.suggested_action = suggested_action

        logger.error(
            f"Quote engine error: {code.value}",
            extra={
                "error_code": code.value,
                "user_message": user_message,
                "technical_details": technical_details,
                "context": self.context,
                "suggested_action": suggested_action
            }
        )

        super().__init__(self.user_message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API response format."""
        response = {
            "error": {
                "code": self.code.value,
                "message": self.user_message,
                "context": self.context
            }
        }

        if self.suggested_action:
            response["error"]["suggested_action"] = self.suggested_action

        return response

class PricingError(QuoteEngineError):
    """Raised when a quote cannot be produced at all."""

class ConfigurationError(QuoteEngineError):
    """Raised when the engine configuration file holds values we cannot use."""

    def __init__(self, message: str, source: Optional[str] = None, technical_details: Optional[str] = None):
        super().__init__(
            code=ErrorCode.INVALID_CONFIGURATION,
            user_message=message,
            technical_details=technical_details,
            context={"source": source} if source else {},
            suggested_action="Check the engine configuration file"
        )

class ParameterValidationError(QuoteEngineError):
    """Specific error for parameter validation issues."""

    def __init__(
        self,
        parameter_name: str,
        parameter_value: Any,
        expected_format: str,
        technical_details: Optional[str] = None
    ):
        user_message = f"Invalid value for '{parameter_name}': {parameter_value}. Expected: {expected_format}"
        suggested_action = f"Please provide a valid value for {parameter_name}"

        super().__init__(
            code=ErrorCode.INVALID_PARAMETERS,
            user_message=user_message,
            technical_details=technical_details,
            context={
                "parameter_name": parameter_name,
                "parameter_value": str(parameter_value),
                "expected_format": expected_format
            },
            suggested_action=suggested_action
        )

# Convenience functions for common errors
def raise_invalid_parameter(parameter_name: str, value: Any, expected_format: str):
    """Raise a parameter validation error."""
    raise ParameterValidationError(parameter_name, value, expected_format)

def raise_pricing_error(message: str, technical_details: str = None, context: Dict[str, Any] = None):
    """Raise a pricing calculation error."""
    raise PricingError(
        code=ErrorCode.PRICING_CALCULATION_FAILED,
        user_message=message,
        technical_details=technical_details,
        context=context
    )
