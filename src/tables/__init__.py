from .base import Base
from .payment import Payment


__all__ = ['Base', 'Payment']
