"""Webhook alerting for background failures."""

import threading
from datetime import UTC, datetime, timedelta

import httpx
import structlog

from nonceguard.config import settings

logger = structlog.get_logger()

# Rate limiting for error alerts to prevent alert storms
_last_alert_time: datetime | None = None
_alert_lock = threading.Lock()


def _should_send_alert() -> bool:
    """Check if we should send an alert (rate limiting)."""
    global _last_alert_time
    with _alert_lock:
        now = datetime.now(UTC)
        cooldown = timedelta(seconds=settings.alert_cooldown_seconds)
        if _last_alert_time and (now - _last_alert_time) < cooldown:
            return False
        _last_alert_time = now
        return True


def reset_alert_rate_limit() -> None:
    """Reset the rate limit state. Used in tests."""
    global _last_alert_time
    with _alert_lock:
        _last_alert_time = None


def build_alert_payload(error_type: str, message: str, context: dict | None = None) -> dict:
    fields = [{"name": "Error Type", "value": error_type, "inline": True}]
    if message:
        # Truncate long messages
        truncated = message[:500] + "..." if len(message) > 500 else message
        fields.append({"name": "Message", "value": truncated, "inline": False})
    if context:
        for key, value in context.items():
            str_value = str(value)
            truncated = str_value[:200] + "..." if len(str_value) > 200 else str_value
            fields.append({"name": key, "value": truncated, "inline": True})

    return {
        "embeds": [
            {
                "title": "Nonce Sweeper Alert",
                "color": 15158332,  # Red
                "fields": fields,
                "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            }
        ]
    }


def send_error_alert_sync(
    error_type: str,
    message: str,
    *,
    context: dict | None = None,
) -> bool:
    """
    Send an error alert to the configured webhook.

    Returns True if the alert was delivered, False otherwise.
    Failures are logged but never raised; this runs on scheduler threads.
    Rate-limited to one alert per cooldown window.
    """
    webhook_url = settings.alerts_webhook_url

    if not webhook_url:
        logger.debug("alerts_webhook_not_configured")
        return False

    if not _should_send_alert():
        logger.info("alert_rate_limited", error_type=error_type)
        return False

    payload = build_alert_payload(error_type, message, context)

    try:
        with httpx.Client() as client:
            response = client.post(webhook_url, json=payload, timeout=10.0)
            response.raise_for_status()
            logger.info("error_alert_sent", error_type=error_type)
            return True
    except httpx.HTTPStatusError as e:
        logger.error(
            "alert_webhook_error",
            error_type=error_type,
            status_code=e.response.status_code,
        )
        return False
    except httpx.RequestError as e:
        logger.error(
            "alert_request_error",
            error_type=error_type,
            error=str(e),
        )
        return False
