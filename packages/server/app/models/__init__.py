# SQLModel definitions, imported so metadata is populated before create_all.
from .base import TimestampMixin  # noqa: F401
from .account import Account  # noqa: F401
from .organization import Organization  # noqa: F401
from .org_account import OrgAccount  # noqa: F401
from .org_invitation import OrgInvitation  # noqa: F401
from .package import Package  # noqa: F401
