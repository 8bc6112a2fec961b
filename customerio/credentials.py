"""Customer.io API credentials.

One credential set covers every API family: the Track and Pipelines APIs
authenticate with Basic ``site_id:track_api_key``, the App and Beta APIs with
a Bearer App API key.
"""
from __future__ import annotations
from dataclasses import dataclass
import base64
import os

from customerio.constants import REGIONS, TRACK_API_HOSTS
from customerio.errors import CredentialsError
from customerio.properties import NodeProperty, PropertyType, choices


CREDENTIAL_NAME = "customerio_api"


@dataclass(frozen=True)
class CustomerIoCredentials:
    site_id: str
    track_api_key: str
    app_api_key: str
    region: str = "us"

    def __post_init__(self):
        if self.region not in REGIONS:
            raise CredentialsError(f"Unknown region: {self.region!r} (expected one of {', '.join(REGIONS)})")
        missing = [name for name in ("site_id", "track_api_key", "app_api_key") if not getattr(self, name)]
        if missing:
            raise CredentialsError(f"Missing credential field(s): {', '.join(missing)}")

    def __repr__(self) -> str:
        return f"CustomerIoCredentials(site_id={self.site_id!r}, region={self.region!r})"

    @classmethod
    def from_env(cls, prefix: str = "CUSTOMERIO_") -> "CustomerIoCredentials":
        """Load from CUSTOMERIO_SITE_ID, CUSTOMERIO_TRACK_API_KEY,
        CUSTOMERIO_APP_API_KEY and CUSTOMERIO_REGION."""
        return cls(
            site_id=os.getenv(f"{prefix}SITE_ID", ""),
            track_api_key=os.getenv(f"{prefix}TRACK_API_KEY", ""),
            app_api_key=os.getenv(f"{prefix}APP_API_KEY", ""),
            region=os.getenv(f"{prefix}REGION", "us").lower(),
        )

    @property
    def basic_auth(self) -> str:
        encoded = base64.b64encode(f"{self.site_id}:{self.track_api_key}".encode()).decode()
        return f"Basic {encoded}"

    @property
    def bearer_auth(self) -> str:
        return f"Bearer {self.app_api_key}"


CREDENTIAL_PROPERTIES = [
    NodeProperty(
        display_name="Region",
        name="region",
        type=PropertyType.OPTIONS,
        options=choices(("US", "us"), ("EU", "eu")),
        default="us",
        description="The region where your Customer.io account is hosted",
    ),
    NodeProperty(
        display_name="Site ID",
        name="site_id",
        type=PropertyType.STRING,
        default="",
        required=True,
        description="Your Customer.io Site ID (found in Settings > API Credentials)",
    ),
    NodeProperty(
        display_name="Track API Key",
        name="track_api_key",
        type=PropertyType.STRING,
        default="",
        required=True,
        password=True,
        description="Your Customer.io Track API Key (found in Settings > API Credentials)",
    ),
    NodeProperty(
        display_name="App API Key",
        name="app_api_key",
        type=PropertyType.STRING,
        default="",
        required=True,
        password=True,
        description="Your Customer.io App API Key (found in Settings > API Credentials > App API)",
    ),
]


def credential_test_request(credentials: CustomerIoCredentials) -> dict:
    """Request the host issues to check a credential set."""
    return {
        "method": "GET",
        "url": f"{TRACK_API_HOSTS[credentials.region]}/auth",
        "headers": {"Authorization": credentials.basic_auth},
    }
