from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Type, TypeVar

from mcp import types
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import get_settings
from ..errors import ValidationError, classify_error, log_error
from ..responses import elapsed_ms, format_error, format_success
from . import ToolHandler

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Evaluator = Callable[[ModelT], Dict[str, Any]]


def validate_arguments(tool_name: str, schema: Type[ModelT], arguments: Any) -> ModelT:
    """Parse raw tool arguments, raising the domain `ValidationError` on failure."""
    try:
        return schema.model_validate(arguments if arguments is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(tool_name, exc) from exc


def tool_spec(name: str, title: str, description: str, schema: Type[BaseModel]) -> types.Tool:
    return types.Tool(
        name=name,
        title=title,
        description=description,
        inputSchema=schema.model_json_schema(),
    )


def tool_handler(name: str, schema: Type[ModelT], evaluate: Evaluator) -> ToolHandler:
    """
    Build the MCP handler for a clinical tool.

    The handler runs validate -> evaluate -> format. Any fault along the way
    is classified and returned as an error envelope instead of propagating,
    so transports always receive a structured payload.
    """

    async def _handle(arguments: Dict[str, Any]) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            data = validate_arguments(name, schema, arguments)
            result = evaluate(data)
        except Exception as exc:
            error = classify_error(exc, f"Error in {name} tool handler")
            log_error(error, context=name)
            return format_error(error, tool_name=name, user_input=arguments)

        took = elapsed_ms(started)
        if took > get_settings().max_processing_time_ms:
            logger.warning("Tool %s took %.1f ms", name, took)
        else:
            logger.debug("Tool %s completed in %.1f ms", name, took)
        return format_success(result, started)

    return _handle
