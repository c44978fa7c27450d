"""
Shared fixtures for the scoring engine test suite.
"""

import pytest
from datetime import date, timedelta

from core.ingestion import TypedPropertyRecord


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def create_record(reference_date):
    """Factory for typed records with sensible defaults."""
    def _create(
        parcel_id="100-001",
        days_delinquent=730,
        power_to_sale_date=None,
        tax_area="TA-01",
        location="Anytown, CA",
        delinquent_amount=12500.0,
        land_value=180000.0,
        improvement_value=270000.0,
        property_description="Single Family Residence",
        address="12 Oak Street",
        **kwargs,
    ):
        if power_to_sale_date is None and days_delinquent is not None:
            power_to_sale_date = reference_date - timedelta(days=days_delinquent)
        return TypedPropertyRecord(
            parcel_id=parcel_id,
            power_to_sale_date=power_to_sale_date,
            tax_area=tax_area,
            location=location,
            delinquent_amount=delinquent_amount,
            land_value=land_value,
            improvement_value=improvement_value,
            property_description=property_description,
            address=address,
            **kwargs,
        )
    return _create


SAMPLE_CSV = """Parcel Number,Power to Sale Date,Tax Area,Location,Delinquent Amount,Land Value,Improvement Value,Property Description,Address
123-456,06/01/2022,TA-01,"Anytown, CA","$12,500.00","$180,000","$270,000",Single Family Residence,12 Oak Street
789-012,2023-12-01,TA-02,Downtown Metro City,"$1,500","$20,000","$5,000",Commercial retail building,100 Main St
,01/15/2020,TA-03,Rural County,0,"$5,000",,Vacant lot 10 acres,
555-555,13/45/2023,TA-01,Springfield Suburb,$800,"$3,000","$1,000",Duplex building,5 Elm Ave
"""


@pytest.fixture
def sample_csv():
    """
    Four-row county export.

    Row 1: valid, scores 68 at the reference date
    Row 2: valid, scores 77
    Row 3: missing parcel ID and zero amount, scores 45
    Row 4: impossible sale date, scores 60
    """
    return SAMPLE_CSV
