"""Application-wide constants."""

PROJECT_NAME = "Mis Compras"
API_V1_STR = "/api/v1"
VERSION = "1.0.0"
SCHEMA_VERSION = "20260301_000000"

# Roles allowed to see every invoice.
INVOICE_VIEWER_ROLES = ("ADMIN", "DIRECTOR", "AUDITOR", "DEVELOPER")

# Roles that review budget adjustments and may see all of them.
ADJUSTMENT_REVIEWER_ROLES = ("DIRECTOR", "ADMIN")
