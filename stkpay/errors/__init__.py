from stkpay.errors.exceptions import (
    AppError,
    ValidationError,
    InitiationRejected,
    UpstreamUnavailable,
    UpstreamTimeout,
    UpstreamAuthError,
    DarajaAPIError,
    MalformedCallback,
)

__all__= [
    'AppError',
    'ValidationError',
    'InitiationRejected',
    'UpstreamUnavailable',
    'UpstreamTimeout',
    'UpstreamAuthError',
    'DarajaAPIError',
    'MalformedCallback',
]
