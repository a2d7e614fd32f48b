from sqlalchemy import Column, BigInteger, Float, Integer, String, Index
from models.base import Base


class CarCost(Base):
    """
    Monthly car cost breakdown published by LTA, one row per model listed.

    Text cells left blank in the workbook are stored as NULL. The two
    "difference" columns are NULL where the workbook shows "-".
    """
    __tablename__ = "car_costs"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    month = Column(String(7), nullable=False, index=True)
    sn = Column(Integer, nullable=False)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(255))
    coe_cat = Column(String(20))
    engine_capacity = Column(String(50))
    max_power_output = Column(Float, nullable=False, default=0)
    fuel_type = Column(String(50))
    co2 = Column(Float, nullable=False, default=0)
    ves_banding = Column(String(20))
    omv = Column(Float, nullable=False, default=0)
    gst_excise_duty = Column(Float, nullable=False, default=0)
    arf = Column(Float, nullable=False, default=0)
    ves_surcharge_rebate = Column(Float, nullable=False, default=0)
    eeai = Column(Float, nullable=False, default=0)
    registration_fee = Column(Float, nullable=False, default=0)
    coe_premium = Column(Float, nullable=False, default=0)
    total_basic_cost_without_coe = Column(Float, nullable=False, default=0)
    total_basic_cost_with_coe = Column(Float, nullable=False, default=0)
    selling_price_without_coe = Column(Float, nullable=False, default=0)
    selling_price_with_coe = Column(Float, nullable=False, default=0)
    difference_without_coe = Column(Float)
    difference_with_coe = Column(Float)

    __table_args__ = (
        Index("idx_car_costs_key", "month", "sn", unique=True),
    )
