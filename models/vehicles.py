from sqlalchemy import Column, BigInteger, Integer, String, Index
from models.base import Base


class Car(Base):
    """
    Monthly new car registrations by make, fuel type and vehicle type.

    Field Mapping (LTA CSV -> column):
    - month -> month (YYYY-MM)
    - make -> make (uppercased, dots removed)
    - importer_type -> importer_type
    - fuel_type -> fuel_type
    - vehicle_type -> vehicle_type ("Saloon / Sports" -> "Saloon/Sports")
    - number -> number (blank cells mean zero registrations)
    """
    __tablename__ = "cars"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    month = Column(String(7), nullable=False, index=True)
    make = Column(String(100), nullable=False, index=True)
    importer_type = Column(String(50), nullable=True)
    fuel_type = Column(String(50), nullable=False)
    vehicle_type = Column(String(100), nullable=False)
    number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_cars_key", "month", "make", "fuel_type", "vehicle_type", unique=True),
    )


class Deregistration(Base):
    """Monthly de-registered motor vehicles under the Vehicle Quota System"""
    __tablename__ = "deregistrations"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    month = Column(String(7), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_deregistrations_key", "month", "category", unique=True),
    )


class VehiclePopulation(Base):
    """
    Annual motor vehicle population by vehicle type and fuel.

    Field Mapping (LTA CSV -> column):
    - year -> year
    - type -> category
    - engine -> fuel_type
    - number -> number
    """
    __tablename__ = "vehicle_population"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    year = Column(String(4), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    fuel_type = Column(String(50), nullable=False)
    number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_vehicle_population_key", "year", "category", "fuel_type", unique=True),
    )


class CarPopulation(Base):
    """Annual car population by make and fuel type"""
    __tablename__ = "car_population"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    year = Column(String(4), nullable=False, index=True)
    make = Column(String(100), nullable=False)
    fuel_type = Column(String(50), nullable=False)
    number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_car_population_key", "year", "make", "fuel_type", unique=True),
    )
