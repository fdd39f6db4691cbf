"""
Shipping plan schema tests.

Malformed records are flagged and dropped in lenient mode and raise in strict
mode; well-formed records pass through in input order.
"""

import json
import math

import pytest

from network.schema import (
    FlowRecord,
    ShippingPlanError,
    load_service_response,
    parse_shipping_plan,
    parse_warehouses_opened,
)


class TestParseShippingPlan:

    def test_accepts_well_formed_records(self, small_plan):
        """Valid records come through unchanged and in order."""
        plan = parse_shipping_plan(small_plan)
        assert plan.plant_to_warehouse == [FlowRecord("P1", "W1", 100.0)]
        assert plan.warehouse_to_customer == [FlowRecord("W1", "C1", 40.0)]
        assert plan.rejected == []

    def test_missing_sections_are_empty(self):
        """Absent sections and a None payload mean an empty plan."""
        plan = parse_shipping_plan({})
        assert plan.plant_to_warehouse == []
        assert plan.warehouse_to_customer == []

        assert parse_shipping_plan(None).rejected == []

    def test_integer_ids_are_coerced(self):
        """Numeric ids become strings, numeric strings become amounts."""
        plan = parse_shipping_plan({"plant_to_warehouse": [{"plant": 1, "warehouse": 2, "amount": "5"}]})
        assert plan.plant_to_warehouse == [FlowRecord("1", "2", 5.0)]

    def test_malformed_records_are_flagged(self):
        """Bad records are dropped and reported with section and index."""
        payload = {
            "plant_to_warehouse": [
                {"plant": "P1", "warehouse": "W1", "amount": 10},
                {"plant": "P1", "amount": 10},
                {"plant": "P2", "warehouse": "W1", "amount": -3},
            ],
            "warehouse_to_customer": [
                "not a record",
                {"warehouse": "W1", "customer": "", "amount": 4},
                {"warehouse": "W1", "customer": "C1", "amount": math.nan},
            ],
        }
        plan = parse_shipping_plan(payload)
        assert len(plan.plant_to_warehouse) == 1
        assert plan.warehouse_to_customer == []

        rejected = [(r.section, r.index) for r in plan.rejected]
        assert rejected == [
            ("plant_to_warehouse", 1),
            ("plant_to_warehouse", 2),
            ("warehouse_to_customer", 0),
            ("warehouse_to_customer", 1),
            ("warehouse_to_customer", 2),
        ]
        assert "warehouse" in plan.rejected[0].reason

    def test_strict_mode_raises(self):
        """Strict mode fails on the first malformed record."""
        payload = {"warehouse_to_customer": [{"warehouse": "W1", "amount": 1}]}
        with pytest.raises(ShippingPlanError, match=r"warehouse_to_customer\[0\]"):
            parse_shipping_plan(payload, strict=True)

    def test_non_list_section_raises(self):
        """A section that is not a list is a shape error in any mode."""
        with pytest.raises(ShippingPlanError):
            parse_shipping_plan({"plant_to_warehouse": {"plant": "P1"}})

    def test_zero_amount_is_valid(self):
        """0 is a legitimate flow amount."""
        plan = parse_shipping_plan({"plant_to_warehouse": [{"plant": "P1", "warehouse": "W1", "amount": 0}]})
        assert plan.plant_to_warehouse[0].amount == 0.0


def test_parse_warehouses_opened_drops_invalid_ids():
    """Ids that cannot be coerced are skipped; None means no warehouses."""
    assert parse_warehouses_opened(["W1", None, "", 3]) == ["W1", "3"]
    assert parse_warehouses_opened(None) == []


def test_load_service_response(tmp_path, small_plan):
    """A saved service response is read into a ServiceResult."""
    path = tmp_path / "result.json"
    path.write_text(
        json.dumps(
            {
                "status": "Optimal",
                "objective_value": 12345.5,
                "warehouses_opened": ["W1"],
                "shipping_plan": small_plan,
                "network_metrics": {"total_revenue": 1.0},
            }
        )
    )
    result = load_service_response(path)
    assert result.status == "Optimal"
    assert result.objective_value == pytest.approx(12345.5)
    assert result.warehouses_opened == ["W1"]
    assert len(result.shipping_plan.plant_to_warehouse) == 1
    assert result.network_metrics == {"total_revenue": 1.0}


def test_load_service_response_rejects_non_object(tmp_path):
    """The top-level JSON value must be an object."""
    path = tmp_path / "result.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ShippingPlanError):
        load_service_response(path)


@pytest.mark.parametrize("ids", ["W12", b"W12", {"W1": True}, 12])
def test_parse_warehouses_opened_rejects_non_list(ids):
    """A single string is not split into one warehouse per character."""
    with pytest.raises(ShippingPlanError, match="warehouses_opened"):
        parse_warehouses_opened(ids)


def test_parse_warehouses_opened_accepts_tuples_and_generators():
    """Any non-string iterable of ids is accepted."""
    assert parse_warehouses_opened(("W1", "W2")) == ["W1", "W2"]
    assert parse_warehouses_opened(w for w in ["W3"]) == ["W3"]


def write_response(tmp_path, **fields):
    payload = {"status": "Optimal", "warehouses_opened": ["W1"], "shipping_plan": {}}
    payload.update(fields)
    path = tmp_path / "result.json"
    path.write_text(json.dumps(payload))
    return path


@pytest.mark.parametrize("objective", ["N/A", "", [1], True, 10**400])
def test_unreadable_objective_becomes_none(tmp_path, objective):
    """An objective that is not a finite number is dropped, not fatal."""
    result = load_service_response(write_response(tmp_path, objective_value=objective))
    assert result.objective_value is None
    assert result.warehouses_opened == ["W1"]


def test_numeric_string_objective_is_read(tmp_path):
    """A numeric string objective is converted like any number."""
    result = load_service_response(write_response(tmp_path, objective_value="42.5"))
    assert result.objective_value == pytest.approx(42.5)


def test_unreadable_objective_raises_when_strict(tmp_path):
    """Strict loading refuses an objective that is not a number."""
    with pytest.raises(ShippingPlanError, match="objective_value"):
        load_service_response(write_response(tmp_path, objective_value="N/A"), strict=True)


@pytest.mark.parametrize("metrics", [[1, 2], "total=3", 7])
def test_non_object_metrics_become_empty(tmp_path, metrics):
    """network_metrics that is not an object is replaced by {}."""
    result = load_service_response(write_response(tmp_path, network_metrics=metrics))
    assert result.network_metrics == {}


def test_non_object_metrics_raise_when_strict(tmp_path):
    """Strict loading refuses network_metrics that is not an object."""
    with pytest.raises(ShippingPlanError, match="network_metrics"):
        load_service_response(write_response(tmp_path, network_metrics=[1, 2]), strict=True)


def test_string_warehouses_in_response_raise(tmp_path):
    """A response listing its opened warehouses as one string is rejected."""
    with pytest.raises(ShippingPlanError):
        load_service_response(write_response(tmp_path, warehouses_opened="W12"))
