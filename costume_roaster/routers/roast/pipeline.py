"""Reusable request pipeline shared by every roast endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from costume_roaster.config import logger
from costume_roaster.core import gemini
from costume_roaster.core.error_translation import translate_error
from costume_roaster.core.errors import RoastAppError, ValidationError
from costume_roaster.core.gemini import GenerateContentResult, GenerationPreset

from .models import ErrorResponse

InputT = TypeVar("InputT")


def error_response(error: RoastAppError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(success=False, error=error.message).model_dump(),
    )


async def read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body") from None


@dataclass(frozen=True)
class CapabilityPipeline(Generic[InputT]):
    """
    parse body -> validate -> execute -> shape, with failures translated into
    the error taxonomy and rendered as ``{"success": false, "error": ...}``.
    """

    name: str
    validator: Callable[[Any], InputT]
    executor: Callable[[InputT], Awaitable[Any]]
    failure_message: str
    content_policy_message: Optional[str] = None

    async def run(self, request: Request) -> Response:
        logger.info(f"{self.name} request received")

        try:
            body = await read_json_body(request)
            payload = self.validator(body)
        except RoastAppError as exc:
            logger.info(
                f"{self.name} request rejected",
                extra={"reason": exc.message, "status_code": exc.status_code},
            )
            return error_response(exc)

        try:
            result = await self.executor(payload)
        except Exception as exc:
            translated = translate_error(
                exc, self.failure_message, self.content_policy_message
            )
            logger.error(
                f"Error in {self.name}: {exc}",
                exc_info=not isinstance(exc, RoastAppError),
                extra={"status_code": translated.status_code},
            )
            return error_response(translated)

        logger.info(f"{self.name} request completed")
        if isinstance(result, Response):
            return result
        if isinstance(result, BaseModel):
            return JSONResponse(content=result.model_dump())
        return JSONResponse(content=result)


PartsBuilder = Callable[[InputT, str], List[Dict[str, Any]]]
Shaper = Callable[[InputT, str, GenerateContentResult], Any]


def gemini_executor(
    model_accessor: Callable[[], gemini.GeminiModel],
    preset: GenerationPreset,
    prompt_builder: Callable[[InputT], str],
    parts_builder: PartsBuilder,
    shaper: Shaper,
) -> Callable[[InputT], Awaitable[Any]]:
    """
    Build an executor that prompts a Gemini model and shapes its result.

    The prompt builder runs first so template errors surface before any
    external call is made.
    """

    async def _execute(payload: InputT) -> Any:
        prompt = prompt_builder(payload)
        model = model_accessor()
        result = await model.generate_content(parts_builder(payload, prompt), preset)
        return shaper(payload, prompt, result)

    return _execute


__all__ = ["CapabilityPipeline", "gemini_executor", "error_response", "read_json_body"]
