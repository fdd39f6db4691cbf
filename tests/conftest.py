import pytest


@pytest.fixture
def small_plan():
    """One plant, one opened warehouse, one customer."""
    return {
        "plant_to_warehouse": [{"plant": "P1", "warehouse": "W1", "amount": 100}],
        "warehouse_to_customer": [{"warehouse": "W1", "customer": "C1", "amount": 40}],
    }


@pytest.fixture
def mixed_plan():
    """Two plants, three warehouses (one unopened), shared customers."""
    return {
        "plant_to_warehouse": [
            {"plant": "P1", "warehouse": "W1", "amount": 120},
            {"plant": "P2", "warehouse": "W2", "amount": 60},
            {"plant": "P1", "warehouse": "W2", "amount": 30},
            {"plant": "P2", "warehouse": "W9", "amount": 10},  # W9 never opened
        ],
        "warehouse_to_customer": [
            {"warehouse": "W1", "customer": "C1", "amount": 70},
            {"warehouse": "W1", "customer": "C2", "amount": 50},
            {"warehouse": "W2", "customer": "C2", "amount": 25},
            {"warehouse": "W2", "customer": "C3", "amount": 65},
            {"warehouse": "W9", "customer": "C4", "amount": 10},
        ],
    }


@pytest.fixture
def mixed_opened():
    return ["W1", "W2", "W3"]
