from .users import User, LoginCredential
from .requests import DeletionRequest, AddStaffRequest
from .sales import SalesEntry
from .notifications import Notification

__all__ = [
    'User', 'LoginCredential',
    'DeletionRequest', 'AddStaffRequest',
    'SalesEntry',
    'Notification',
]
