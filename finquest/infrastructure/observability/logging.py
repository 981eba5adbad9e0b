"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "finquest-api"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement(request_id: str, user_id: str, goal_id: str, outcome: str, coins: int, balance: int) -> None:
    """Log one goal settlement and its effect on the coin balance"""
    logging.info(
        "Goal settled",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "goal_id": goal_id,
            "step": "goal_settlement",
            "outcome": outcome,
            "coins": coins,
            "balance_after": balance,
        },
    )


def log_payment_event(request_id: str, user_id: str, event: str, order_id: str, **fields: Any) -> None:
    """Log a payment lifecycle step (order created, verified, rejected, refunded)"""
    logging.info(
        f"Payment {event}",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": f"payment_{event}",
            "order_id": order_id,
            **fields,
        },
    )
