"""
Pytest fixtures for Tailorman tests.
"""

import pytest
from django.contrib.auth import get_user_model

from tailorman.models import (
    Batch,
    BatchStatus,
    Bin,
    BinType,
    Commitment,
    Customer,
    ProductionRequest,
    ProductionRequestStatus,
    Stage,
    Unit,
    Wash,
)
from tailorman.services.orders import OrderIntake
from tailorman.sku import Sku


User = get_user_model()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='operator',
        password='testpass123'
    )


@pytest.fixture
def customer(db):
    """Create a test customer."""
    return Customer.objects.create(
        name='Ada Lovelace',
        email='ada@example.com',
        phone='555-0100',
        address='12 Analytical St',
    )


@pytest.fixture
def make_order(customer):
    """Factory: order for a target SKU string."""
    def _make(sku='ST-32-X-32-STA', **kwargs):
        return OrderIntake.create_order(customer, sku, **kwargs)
    return _make


@pytest.fixture
def stock_run(db):
    """Finished production run that stock units are attached to."""
    request = ProductionRequest.objects.create(
        style='ST', waist=32, shape='X', length=36, wash=Wash.RAW,
        quantity=0,
        status=ProductionRequestStatus.COMPLETED,
    )
    return Batch.objects.create(production_request=request, status=BatchStatus.COMPLETED)


@pytest.fixture
def make_unit(stock_run):
    """
    Factory: unit created directly (bin counts are NOT adjusted).

    Defaults to anonymous stock.
    """
    def _make(sku='ST-32-X-32-STA', stage=Stage.STOCK, commitment=Commitment.UNCOMMITTED,
              bin=None, order=None, batch=None):
        sku = sku if isinstance(sku, Sku) else Sku.parse(sku)
        batch = batch or stock_run
        return Unit.objects.create(
            batch=batch,
            production_request=batch.production_request,
            stage=stage,
            commitment=commitment,
            bin=bin,
            order=order,
            **sku.as_fields(),
        )
    return _make


@pytest.fixture
def storage_bins(db):
    """Two storage bins, A created before B."""
    a = Bin.objects.create(code='STORAGE-Z1A', name='ZONE1-A', type=BinType.STORAGE, zone='ZONE1', capacity=10)
    b = Bin.objects.create(code='STORAGE-Z1B', name='ZONE1-B', type=BinType.STORAGE, zone='ZONE1', capacity=10)
    return a, b


@pytest.fixture
def wash_bin(db):
    """Stardust wash bin."""
    return Bin.objects.create(
        code='WASH-STA-001', name='STARDUST', type=BinType.WASH, zone='WASH', wash=Wash.STA, capacity=50,
    )


@pytest.fixture
def onyx_bin(db):
    """Onyx wash bin."""
    return Bin.objects.create(
        code='WASH-ONX-001', name='ONYX', type=BinType.WASH, zone='WASH', wash=Wash.ONX, capacity=50,
    )
