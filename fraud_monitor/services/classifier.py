"""
Alert classification for scored prediction records
"""
from typing import Any, Iterable, List, Mapping

FRAUD_PROBABILITY_THRESHOLD = 0.5


def _is_number(value: Any) -> bool:
    # bool is a subclass of int but never counts as a score
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_alert(record: Any) -> bool:
    """Return True when a prediction record should be raised as a fraud alert.

    A record is an alert if `predicted_fraud` is boolean True or the number 1,
    or if `fraud_probability` is a number strictly above 0.5. Strings such as
    "1" or "true" are not accepted. Missing fields never trigger.
    """
    if not isinstance(record, Mapping):
        return False

    predicted = record.get("predicted_fraud")
    if predicted is True:
        return True
    if _is_number(predicted) and predicted == 1:
        return True

    probability = record.get("fraud_probability")
    return _is_number(probability) and probability > FRAUD_PROBABILITY_THRESHOLD


def select_alerts(predictions: Iterable[Any]) -> List[Any]:
    """Alert subset of a batch, in original order"""
    return [record for record in predictions if is_alert(record)]
