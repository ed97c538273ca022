from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import get_settings
from .errors import ClinicalToolError


def elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def format_success(result: Dict[str, Any], started: float) -> Dict[str, Any]:
    """
    Wrap a tool's output in the success envelope.

    `started` is a `time.perf_counter()` reading taken before validation.
    """
    return {
        "result": result,
        "metadata": {
            "processing_time_ms": elapsed_ms(started),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data_source": "local_processing",
            "server_version": get_settings().server_version,
        },
    }


def format_error(
    error: ClinicalToolError,
    tool_name: Optional[str] = None,
    user_input: Any = None,
) -> Dict[str, Any]:
    """
    Build the error envelope for a classified failure.

    The tool name and raw input are folded into the error details so the
    calling agent can see what it sent.
    """
    if tool_name is not None:
        error = error.with_context(tool_name=tool_name, user_input=user_input)

    payload = error.to_dict()
    payload["clinical_safety"] = {
        "level": "low",
        "action_required": "Review the error and consider alternative actions.",
        "patient_guidance": "Contact support if the issue persists.",
        "provider_notification": error.should_alert(),
    }
    payload["recovery_info"] = {
        "is_recoverable": error.recoverable,
        "strategy": "retry" if error.recoverable else "abort",
        "retry_delay_ms": 1000 if error.recoverable else 0,
    }
    return {
        "error": payload,
        "recovery_actions": list(error.suggestions),
    }


def is_error_envelope(payload: Dict[str, Any]) -> bool:
    return "error" in payload and "result" not in payload
