from .customers import Customer
from .inventory import InventoryItem
from .orders import Order, OrderLine
from .payments import Payment
from .documents import DocumentSequence
from .back_office import Expense, TaxRecord

__all__ = [
    'Customer',
    'InventoryItem',
    'Order', 'OrderLine',
    'Payment',
    'DocumentSequence',
    'Expense', 'TaxRecord',
]
