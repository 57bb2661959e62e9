# -------------------------
# Enums
# -------------------------
from .enums import (
    ContactMethod,
    MaintenanceStatus,
    NotificationType,
    PhotoStage,
    ReportType,
    ServiceType,
    SubscriptionStatus,
)

# -------------------------
# Condominium Models
# -------------------------
from .condominium import (
    CondominiumBase,
    CondominiumCreate,
    CondominiumRead,
    CondominiumUpdate,
)

# -------------------------
# Supplier Models
# -------------------------
from .supplier import (
    SupplierBase,
    SupplierCreate,
    SupplierRead,
    SupplierUpdate,
)

# -------------------------
# Maintenance Models
# -------------------------
from .maintenance import (
    MaintenanceCreate,
    MaintenanceFinalize,
    MaintenanceStatusUpdate,
    MaintenanceUpdate,
    SupplierContactRequest,
    SupplierContactResponse,
)

# -------------------------
# Reports
# -------------------------
from .report import ReportCreate

# -------------------------
# Profile / Auth / Signup
# -------------------------
from .profile import ProfileUpdate
from .auth import LoginRequest, PasswordResetRequest, TokenResponse
from .signup import CheckoutRequest, SignupConfirm, SignupCreate, SignupResponse
from .subscription import UserSubscriptionRead

__all__ = [
    # enums
    "ContactMethod",
    "MaintenanceStatus",
    "NotificationType",
    "PhotoStage",
    "ReportType",
    "ServiceType",
    "SubscriptionStatus",

    # condominiums
    "CondominiumBase",
    "CondominiumCreate",
    "CondominiumRead",
    "CondominiumUpdate",

    # suppliers
    "SupplierBase",
    "SupplierCreate",
    "SupplierRead",
    "SupplierUpdate",

    # maintenance
    "MaintenanceCreate",
    "MaintenanceFinalize",
    "MaintenanceStatusUpdate",
    "MaintenanceUpdate",
    "SupplierContactRequest",
    "SupplierContactResponse",

    # reports
    "ReportCreate",

    # profile / auth / signup
    "ProfileUpdate",
    "LoginRequest",
    "PasswordResetRequest",
    "TokenResponse",
    "CheckoutRequest",
    "SignupConfirm",
    "SignupCreate",
    "SignupResponse",
    "UserSubscriptionRead",
]
