"""Async clients for the portfolio API."""

from portfolio_cms.client.api import PortfolioApi
from portfolio_cms.client.auth import AuthClient
from portfolio_cms.client.payload import Payload
from portfolio_cms.client.resources import ResourceClient, UserDetailsClient
from portfolio_cms.client.transport import ApiTransport

__all__ = [
    "ApiTransport",
    "AuthClient",
    "Payload",
    "PortfolioApi",
    "ResourceClient",
    "UserDetailsClient",
]
