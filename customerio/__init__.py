"""
Customer.io integration.

Action node over the Track, App, Pipelines and Beta APIs plus a trigger for
reporting webhooks.
"""
from customerio.config import ClientConfig, WebhookConfig
from customerio.context import (
    ExecutionContext,
    ExecutionItem,
    WebhookRequest,
    WebhookResponse,
)
from customerio.credentials import CustomerIoCredentials
from customerio.errors import (
    ConfigurationError,
    CredentialsError,
    CustomerIoApiError,
    CustomerIoError,
    NodeOperationError,
    NodeParameterError,
)
from customerio.node import CustomerIoNode
from customerio.transport import ApiType, CustomerIoClient
from customerio.trigger import CustomerIoTrigger

__all__ = [
    "ApiType",
    "ClientConfig",
    "ConfigurationError",
    "CredentialsError",
    "CustomerIoApiError",
    "CustomerIoClient",
    "CustomerIoCredentials",
    "CustomerIoError",
    "CustomerIoNode",
    "CustomerIoTrigger",
    "ExecutionContext",
    "ExecutionItem",
    "NodeOperationError",
    "NodeParameterError",
    "WebhookConfig",
    "WebhookRequest",
    "WebhookResponse",
]
