from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# SERVICE TYPE (stored values are the pt-BR labels)
# -----------------------------------------------------
class ServiceType(BaseStrEnum):
    """Catalogue shared by suppliers and maintenance requests."""

    eletrica = "Elétrica"
    hidraulica = "Hidráulica"
    pintura = "Pintura"
    limpeza = "Limpeza"
    jardinagem = "Jardinagem"
    obras = "Obras"
    climatizacao = "Climatização"
    seguranca = "Segurança"
    elevadores = "Elevadores"
    portaria = "Portaria"
    administracao = "Administração"
    outros = "Outros"


# -----------------------------------------------------
# MAINTENANCE STATUS
# -----------------------------------------------------
class MaintenanceStatus(BaseStrEnum):
    """Workflow state of a maintenance request."""

    open = "open"
    in_progress = "in_progress"
    completed = "completed"


# -----------------------------------------------------
# PHOTO STAGE
# -----------------------------------------------------
class PhotoStage(BaseStrEnum):
    """Before / after pictures; also the storage folder name."""

    before = "before"
    after = "after"


# -----------------------------------------------------
# SUPPLIER CONTACT CHANNEL
# -----------------------------------------------------
class ContactMethod(BaseStrEnum):
    email = "email"
    whatsapp = "whatsapp"


# -----------------------------------------------------
# REPORT TYPE
# -----------------------------------------------------
class ReportType(BaseStrEnum):
    """Reporting period preset."""

    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"
    custom = "custom"


# -----------------------------------------------------
# NOTIFICATION TYPE
# -----------------------------------------------------
class NotificationType(BaseStrEnum):
    info = "info"
    warning = "warning"
    error = "error"
    success = "success"


# -----------------------------------------------------
# SUBSCRIPTION STATUS
# -----------------------------------------------------
class SubscriptionStatus(BaseStrEnum):
    """Stripe subscription status, plus our pre-checkout state."""

    not_started = "not_started"
    active = "active"
    canceled = "canceled"
    past_due = "past_due"
    unpaid = "unpaid"
    trialing = "trialing"
    incomplete = "incomplete"
    incomplete_expired = "incomplete_expired"
    paused = "paused"
