from receptionist.directory.backends import (
    CustomerDirectory,
    MockCustomerDirectory,
    WebhookCustomerDirectory,
)
from receptionist.directory.client import (
    CustomerDirectoryClient,
    get_directory_client,
    new_correlation_id,
)
from receptionist.directory.config import (
    DirectoryConfig,
    load_directory_config,
    validate_directory_config,
)

__all__ = [
    "CustomerDirectory", "MockCustomerDirectory", "WebhookCustomerDirectory",
    "CustomerDirectoryClient", "get_directory_client", "new_correlation_id",
    "DirectoryConfig", "load_directory_config", "validate_directory_config",
]
