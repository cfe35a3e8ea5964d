# Import all models here so SQLAlchemy registers them into Base.metadata.

from cart_report.models.user import User  # noqa: F401
from cart_report.models.cart import Cart  # noqa: F401
