from .auth import User, SessionToken
from .catalog import Product
from .sales import Sale, SaleLine
from .settings import BusinessSettings, StoredFile

__all__ = [
    'User', 'SessionToken',
    'Product',
    'Sale', 'SaleLine',
    'BusinessSettings', 'StoredFile',
]
