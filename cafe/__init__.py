"""Café floor simulation package.

Public API:
    from cafe import CafeSim, Barista, Customer, Order, StaffState, CustomerState
"""
from cafe.entities import Barista, Customer, CustomerState, Order, StaffState
from cafe.simulation import CafeSim

__all__ = ["Barista", "CafeSim", "Customer", "CustomerState", "Order", "StaffState"]
