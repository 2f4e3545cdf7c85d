"""
Broadcast relay: turns an ingested prediction batch into push notifications
"""
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional

from fraud_monitor.config import FRAUD_ALERTS_ROOM
from fraud_monitor.models import FraudAlertEvent, PredictionsEvent, RelaySummary
from fraud_monitor.services.classifier import select_alerts

logger = logging.getLogger(__name__)

NEW_FRAUD_ALERT = "new-fraud-alert"
NEW_PREDICTIONS = "new-predictions"


class InvalidPayload(ValueError):
    """Raised when an ingestion body does not carry a `predictions` list"""

    error = "Invalid payload"
    message = "Expected { predictions: [...] }"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2024-01-01T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_rate(count: int, total: int) -> str:
    """Percentage with two decimals, ties rounded up like the dashboard's toFixed(2)"""
    rate = count / total * 100
    # Decimal(float) keeps the exact binary value, so 3.125 rounds to 3.13
    return str(Decimal(rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def extract_predictions(body: Any) -> list:
    """Return the `predictions` list of a request body or raise InvalidPayload"""
    if not isinstance(body, dict):
        raise InvalidPayload()
    predictions = body.get("predictions")
    if not isinstance(predictions, list):
        raise InvalidPayload()
    return predictions


class BroadcastRelay:
    """Classifies a batch and pushes `new-fraud-alert` / `new-predictions`.

    Stateless between calls. The transport only needs an
    `emit(event, data, room=None)` method; delivery is never awaited.
    """

    def __init__(self, transport, clock: Optional[Callable[[], datetime]] = None):
        self.transport = transport
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def relay(self, predictions: Any) -> RelaySummary:
        if predictions is None or not isinstance(predictions, list):
            raise InvalidPayload()

        logger.info(f"📥 Received {len(predictions)} predictions from pipeline")
        alerts = select_alerts(predictions)

        if alerts:
            logger.info(f"🚨 {len(alerts)} fraud alerts detected")
            timestamp = iso_timestamp(self.clock())

            alert_event = FraudAlertEvent(
                count=len(alerts),
                alerts=alerts,
                timestamp=timestamp,
            )
            self._emit(NEW_FRAUD_ALERT, alert_event.model_dump(), room=FRAUD_ALERTS_ROOM)

            summary_event = PredictionsEvent(
                total=len(predictions),
                fraud_count=len(alerts),
                fraud_rate=format_rate(len(alerts), len(predictions)),
                timestamp=timestamp,
            )
            self._emit(NEW_PREDICTIONS, summary_event.model_dump())

        return RelaySummary(total_received=len(predictions), alert_count=len(alerts))

    def _emit(self, event: str, data: dict, room: Optional[str] = None):
        # best effort: a broken transport never fails the ingestion call
        try:
            self.transport.emit(event, data, room=room)
        except Exception as e:
            logger.warning(f"⚠️ Push channel unavailable, '{event}' dropped: {e}")
