"""
Exception classes for YOP Python SDK
"""

from typing import Optional, Dict, Any


class YopSDKError(Exception):
    """Base exception for all YOP SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ValidationError(YopSDKError):
    """Exception raised for validation failures"""
    pass


class KeyFormatError(YopSDKError):
    """Exception raised when RSA key material or certificates cannot be parsed"""
    pass


class ConfigurationError(YopSDKError):
    """Exception raised for missing or invalid client configuration"""
    pass


class ResponseVerificationError(YopSDKError):
    """Exception raised when a platform response carries an invalid x-yop-sign signature"""
    pass


class ServerCommunicationError(YopSDKError):
    """Exception raised for server communication errors"""
    
    def __init__(self, message: str, error_code: str = "SERVER_ERROR", 
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
