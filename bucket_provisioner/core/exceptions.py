"""Base exception for errors that leave the API as problem documents."""

from __future__ import annotations

from typing import Any

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    412: "Precondition Failed",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


class AppException(Exception):
    """Exception carrying the fields of an RFC 7807 problem document.

    ``type`` names the problem (for provisioning failures, the ErrorKind
    value). ``extra`` is merged into the response body next to the standard
    fields, e.g. ``{"bucket": "b1"}``.

    Subclass this rather than raising it directly; see
    ``bucket_provisioner.infra.storage.exceptions.ProvisioningError``.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or _TITLES.get(status_code, "Error")
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, type={self.type!r}, detail={self.detail!r})"
