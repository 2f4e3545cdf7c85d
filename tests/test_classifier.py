import pytest

from fraud_monitor.services.classifier import is_alert, select_alerts


@pytest.mark.parametrize("record", [
    {"predicted_fraud": True},
    {"predicted_fraud": 1},
    {"predicted_fraud": 1.0},
    {"fraud_probability": 0.51},
    {"predicted_fraud": False, "fraud_probability": 0.9},
    {"predicted_fraud": 0, "fraud_probability": 1},
])
def test_alert_records(record):
    assert is_alert(record) is True


@pytest.mark.parametrize("record", [
    {},
    {"fraud_probability": 0.5},
    {"fraud_probability": 0.1, "predicted_fraud": False},
    {"predicted_fraud": 0},
    {"predicted_fraud": "1"},
    {"predicted_fraud": "true"},
    {"fraud_probability": "0.9"},
    {"fraud_probability": True},
    {"fraud_probability": None},
    {"predicted_fraud": 2},
])
def test_non_alert_records(record):
    assert is_alert(record) is False


def test_non_mapping_record_is_not_an_alert():
    assert is_alert(None) is False
    assert is_alert("fraud") is False
    assert is_alert([1]) is False


def test_select_alerts_keeps_batch_order():
    batch = [
        {"id": "a", "fraud_probability": 0.7},
        {"id": "b", "fraud_probability": 0.2},
        {"id": "c", "predicted_fraud": True},
        {"id": "d"},
        {"id": "e", "predicted_fraud": 1},
    ]
    assert [r["id"] for r in select_alerts(batch)] == ["a", "c", "e"]
