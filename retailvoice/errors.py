"""
Error taxonomy for RetailVoice.

Every failure raised by the ingestion pipeline or the summarization gateway
derives from RetailVoiceError and carries a stable error_code.
"""


class RetailVoiceError(Exception):
    """Base class for RetailVoice failures."""
    
    error_code = "RETAILVOICE_ERROR"


class ParseError(RetailVoiceError):
    """Raised when a sheet payload cannot be turned into a table."""
    
    error_code = "PARSE_ERROR"


class FetchError(RetailVoiceError):
    """Raised for network or HTTP failures against the sheet source."""
    
    error_code = "FETCH_ERROR"


class DataLoadError(RetailVoiceError):
    """Raised when the startup load of stations and reviews fails."""
    
    error_code = "DATA_LOAD_ERROR"


class ConfigurationError(RetailVoiceError):
    """Raised when a required credential is missing."""
    
    error_code = "CONFIGURATION_ERROR"


class UpstreamError(RetailVoiceError):
    """Raised when the summarization service fails."""
    
    error_code = "UPSTREAM_ERROR"


class UpstreamFormatError(UpstreamError):
    """Raised when the summarization service returns an unexpected shape."""
    
    error_code = "UPSTREAM_FORMAT_ERROR"
