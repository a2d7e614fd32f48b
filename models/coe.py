from sqlalchemy import Column, BigInteger, Integer, String, Index
from models.base import Base


class COEResult(Base):
    """
    COE bidding results, one row per bidding exercise and vehicle class.

    Two exercises are held each month (bidding_no 1 and 2), each covering
    categories A to E.
    """
    __tablename__ = "coe"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    month = Column(String(7), nullable=False, index=True)
    bidding_no = Column(Integer, nullable=False)
    vehicle_class = Column(String(50), nullable=False)
    quota = Column(Integer, nullable=False, default=0)
    bids_success = Column(Integer, nullable=False, default=0)
    bids_received = Column(Integer, nullable=False, default=0)
    premium = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_coe_key", "month", "bidding_no", "vehicle_class", unique=True),
        Index("idx_coe_month_bidding", "month", "bidding_no"),
    )


class PQPRate(Base):
    """Prevailing Quota Premium rates per month and vehicle class"""
    __tablename__ = "pqp"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    month = Column(String(7), nullable=False, index=True)
    vehicle_class = Column(String(50), nullable=False)
    pqp = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_pqp_key", "month", "vehicle_class", "pqp", unique=True),
    )
