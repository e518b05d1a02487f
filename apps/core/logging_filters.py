from __future__ import annotations

import logging

LOCATION_FIELDS = ("latitude", "longitude", "location", "coordinates")


class StripRequestBodyFilter(logging.Filter):
    """
    Drop request body/content fields from log records to avoid leaking PII.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr in ("request", "request_body", "data", "body"):
            if hasattr(record, attr):
                setattr(record, attr, None)
        return True


class RedactLocationFilter(logging.Filter):
    """
    Replace precise coordinates passed via `extra=` so user positions never reach log storage.
    """

    placeholder = "[redacted]"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr in LOCATION_FIELDS:
            if getattr(record, attr, None) is not None:
                setattr(record, attr, self.placeholder)
        return True
