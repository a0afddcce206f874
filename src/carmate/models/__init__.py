from .profile import Profile
from .reminder import Reminder
from .service_center import ServiceCenter
from .vehicle import Vehicle

__all__ = ["Profile", "Reminder", "ServiceCenter", "Vehicle"]
