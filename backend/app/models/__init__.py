# Import all models so Base.metadata is populated for create_all / Alembic autogenerate.
from app.models.user import User  # noqa: F401
from app.models.session import Session  # noqa: F401
from app.models.audit import AuditLogEvent  # noqa: F401
from app.models.provider import Provider  # noqa: F401
from app.models.facility import Facility, FacilityPrelive  # noqa: F401
from app.models.credential import ProviderFacilityCredential, StateLicense  # noqa: F401
