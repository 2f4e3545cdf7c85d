# endpoints.py
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from fraud_monitor.database import get_async_database
from fraud_monitor.models import ErrorResponse, IngestionResponse
from fraud_monitor.services.relay import BroadcastRelay, InvalidPayload, extract_predictions

logger = logging.getLogger(__name__)

router = APIRouter()


def get_relay(request: Request) -> BroadcastRelay:
    return request.app.state.relay


def convert_doc_for_json(doc):
    """Convert MongoDB document for JSON serialization"""
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    for field, value in doc.items():
        if isinstance(value, datetime):
            doc[field] = value.isoformat()
    return doc


@router.post(
    "/predictions",
    response_model=IngestionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def receive_predictions(request: Request, relay: BroadcastRelay = Depends(get_relay)):
    """
    Webhook called by the realtime pipeline with a batch of scored transactions.
    Fraud alerts are pushed to subscribed dashboard clients.
    """
    try:
        try:
            body = await request.json()
        except ValueError:
            raise InvalidPayload()

        summary = relay.relay(extract_predictions(body))

        return IngestionResponse(
            received=summary.total_received,
            fraud_alerts=summary.alert_count,
        )

    except InvalidPayload as e:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=InvalidPayload.error, message=str(e)).model_dump(),
        )
    except Exception as e:
        logger.exception(f"Error processing predictions: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal server error", message=str(e)).model_dump(),
        )


@router.get("/frauds/recent")
async def get_recent_frauds(
    limit: int = Query(default=20, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db=Depends(get_async_database),
):
    """Most recent predictions flagged as fraud, newest first"""
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")

    try:
        cursor = (
            db.predictions.find({"is_fraud_predicted": True})
            .sort("prediction_time", -1)
            .skip(offset)
            .limit(limit)
        )
        frauds = []
        async for doc in cursor:
            frauds.append(convert_doc_for_json(doc))

        return {
            "total": len(frauds),
            "frauds": frauds,
            "limit": limit,
            "offset": offset,
        }

    except Exception as e:
        logger.error(f"Error fetching recent frauds: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch fraud alerts: {str(e)}")
