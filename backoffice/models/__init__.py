"""ORM model exports."""

from .category import Category
from .menu_audit_log import MenuAuditLog
from .product import Product
from .user import User

__all__ = [
	"Category",
	"MenuAuditLog",
	"Product",
	"User",
]
