"""Object-storage backend infrastructure.

- ``policy``: bucket policy model and Sid-keyed statement merge
- ``exceptions``: ErrorKind taxonomy and backend error classification
- ``backends``: client protocols, S3 and RGW admin clients, client factory
- ``metrics``: Prometheus metrics for provisioning operations
- ``testing``: in-memory backend clients for tests
"""

from bucket_provisioner.infra.storage.exceptions import (
    ErrorKind,
    ProvisioningError,
    classify_admin_error,
    classify_s3_error,
)
from bucket_provisioner.infra.storage.policy import (
    PolicyDocument,
    PolicyStatement,
    build_access_statement,
    merge_statement,
)

__all__ = [
    "ErrorKind",
    "PolicyDocument",
    "PolicyStatement",
    "ProvisioningError",
    "build_access_statement",
    "classify_admin_error",
    "classify_s3_error",
    "merge_statement",
]
