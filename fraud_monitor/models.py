# fraud_monitor/models.py
from typing import Any, Dict, List
from pydantic import BaseModel


class FraudAlertEvent(BaseModel):
    """Payload of `new-fraud-alert`, sent to the fraud-alerts room only"""
    count: int
    alerts: List[Dict[str, Any]]
    timestamp: str


class PredictionsEvent(BaseModel):
    """Payload of `new-predictions`, sent to every connected client"""
    total: int
    fraud_count: int
    fraud_rate: str  # percentage, two decimals
    timestamp: str


class RelaySummary(BaseModel):
    total_received: int
    alert_count: int


class IngestionResponse(BaseModel):
    status: str = "success"
    received: int
    fraud_alerts: int
    message: str = "Predictions processed and broadcasted"


class ErrorResponse(BaseModel):
    error: str
    message: str
