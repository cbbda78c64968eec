"""Central model registry: import all models so Alembic autodiscover works."""

from portal.database import Base  # noqa: F401

from portal.models.purchase import Purchase  # noqa: F401
