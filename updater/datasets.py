"""
LTA DataMall datasets kept up to date by the updater.

Each archive is published under the DataMall "Facts & Figures" tree. The COE
archive holds two CSV files and feeds two tables. The car cost breakdown is
a single workbook rather than an archive.
"""

from typing import Dict, List

from core.config import settings
from schemas.descriptor import (
    NumericTransform,
    SeparatorJoinTransform,
    SourceDescriptor,
    TransformConfig,
    UppercaseTransform,
)

VEHICLE_REGISTRATION = "Vehicle Registration"
VEHICLE_POPULATION = "Vehicle Population"

COE_ARCHIVE = "COE Bidding Results.zip"


def archive_url(section: str, archive: str) -> str:
    return f"{settings.LTA_DATAMALL_BASE_URL.rstrip('/')}/{section}/{archive}"


MAKE = UppercaseTransform(remove=".")
NUMBER = NumericTransform()

CARS = SourceDescriptor(
    name="cars",
    url=archive_url(VEHICLE_REGISTRATION, "Monthly New Registration of Cars by Make.zip"),
    table="cars",
    key_fields=["month", "make", "fuel_type", "vehicle_type"],
    transform=TransformConfig(
        fields={
            "make": MAKE,
            "vehicle_type": SeparatorJoinTransform(separator="/"),
            "number": NUMBER,
        }
    ),
)

COE = SourceDescriptor(
    name="coe",
    url=archive_url(VEHICLE_REGISTRATION, COE_ARCHIVE),
    table="coe",
    csv_file="M11-coe_results.csv",
    key_fields=["month", "bidding_no", "vehicle_class"],
    transform=TransformConfig(
        fields={
            "bidding_no": NUMBER,
            "quota": NUMBER,
            "bids_success": NUMBER,
            "bids_received": NUMBER,
            "premium": NUMBER,
        }
    ),
)

PQP = SourceDescriptor(
    name="pqp",
    url=archive_url(VEHICLE_REGISTRATION, COE_ARCHIVE),
    table="pqp",
    csv_file="M11-coe_results_pqp.csv",
    key_fields=["month", "vehicle_class", "pqp"],
    transform=TransformConfig(fields={"pqp": NUMBER}),
)

DEREGISTRATIONS = SourceDescriptor(
    name="deregistrations",
    url=archive_url(
        VEHICLE_REGISTRATION,
        "Monthly De-Registered Motor Vehicles under Vehicle Quota System (VQS).zip"
    ),
    table="deregistrations",
    key_fields=["month", "category"],
    transform=TransformConfig(fields={"number": NUMBER}),
)

VEHICLE_POPULATION_BY_FUEL = SourceDescriptor(
    name="vehicle_population",
    url=archive_url(VEHICLE_POPULATION, "Annual Motor Vehicle Population by Type of Fuel Used.zip"),
    table="vehicle_population",
    key_fields=["year", "category", "fuel_type"],
    transform=TransformConfig(
        column_mapping={"type": "category", "engine": "fuel_type"},
        fields={"number": NUMBER},
    ),
)

CAR_POPULATION = SourceDescriptor(
    name="car_population",
    url=archive_url(VEHICLE_POPULATION, "Annual Car Population by Make.zip"),
    table="car_population",
    key_fields=["year", "make", "fuel_type"],
    transform=TransformConfig(fields={"make": MAKE, "number": NUMBER}),
)

CAR_COST = SourceDescriptor(
    name="car_cost",
    url=settings.CAR_COST_XLSX_URL or archive_url(VEHICLE_REGISTRATION, "Car Cost Update.xlsx"),
    table="car_costs",
    source_format="xlsx",
    checksum_key="car-cost-update-xlsx",
    key_fields=["month", "sn"],
)

DATASETS: Dict[str, SourceDescriptor] = {
    descriptor.name: descriptor
    for descriptor in (
        CARS,
        COE,
        PQP,
        DEREGISTRATIONS,
        VEHICLE_POPULATION_BY_FUEL,
        CAR_POPULATION,
        CAR_COST,
    )
}


def get_dataset(name: str) -> SourceDescriptor:
    """
    Look up a registered dataset.

    Raises:
        KeyError: If no dataset is registered under ``name``
    """
    try:
        return DATASETS[name]
    except KeyError:
        raise KeyError(f"Unknown dataset: {name}") from None


def dataset_groups() -> Dict[str, List[SourceDescriptor]]:
    """Datasets grouped the way they are refreshed together."""
    return {
        "cars": [CARS],
        "coe": [COE, PQP],
        "deregistrations": [DEREGISTRATIONS],
        "vehicle_population": [VEHICLE_POPULATION_BY_FUEL],
        "car_population": [CAR_POPULATION],
        "car_cost": [CAR_COST],
    }
