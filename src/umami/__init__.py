from src.umami.client import UmamiClient  # noqa: F401
from src.umami.credentials import UmamiCredentials  # noqa: F401
from src.umami.errors import (  # noqa: F401
    MalformedResponseError,
    UmamiError,
    UpstreamAuthError,
    UpstreamFetchError,
)
