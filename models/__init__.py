"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and the UpdaterState enum
    vehicles: Car registrations, de-registrations and population tables
    coe: COE bidding results and PQP rates
    car_cost: Monthly car cost breakdown from the LTA workbook
    cache_entry: Key/value table backing the change cache

Every destination table carries a surrogate ``id`` primary key and a unique
index over the fields the updater uses as its natural key, so a duplicate
insert is ignored by the database as well as by the updater.

Usage:
    from models import Base, Car, COEResult, CacheEntry
    from models.base import UpdaterState
"""

from models.base import Base, UpdaterState
from models.cache_entry import CacheEntry
from models.car_cost import CarCost
from models.coe import COEResult, PQPRate
from models.vehicles import Car, CarPopulation, Deregistration, VehiclePopulation

__all__ = [
    "Base",
    "UpdaterState",
    "CacheEntry",
    "Car",
    "CarPopulation",
    "Deregistration",
    "VehiclePopulation",
    "COEResult",
    "PQPRate",
    "CarCost",
]
