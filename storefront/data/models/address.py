from sqlalchemy import Column, Integer, String

from storefront.data.database import Base


class AddressModel(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True)
    country = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    postcode = Column(String(20), nullable=False)
    street = Column(String(200), nullable=False)
    number = Column(String(50), nullable=False)
