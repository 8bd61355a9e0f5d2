"""ChurchSync.

Backend for a multi-tenant church administration platform. Every request is
resolved to an organization and a data scope before any query runs, so a
tenant never sees another tenant's rows.

Subpackages
-----------

- ``churchsync.core``: logging, monitoring, errors, rate limiting and the
  persistence layer (SQLModel entities and repositories).
- ``churchsync.domain``: pure business rules with no I/O (connect-card
  normalization and quality checks, volunteer category mapping, prayer
  classification, CSV export formats).
- ``churchsync.integrations``: outbound adapters (SMTP email, GoHighLevel CRM,
  file storage).
- ``churchsync.server``: the FastAPI application, its services and routers.
"""

__version__ = "0.1.0"
