"""
Handler modules with automatic API registration
Functions decorated with @api_handler are collected in a registry and
registered as FastAPI routes by register_fastapi_routes()
"""

import inspect
from datetime import datetime
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
)

from notiapp_backend.core.errors import NotiAppError
from notiapp_backend.core.logger import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger(__name__)

# Global API handler registry
_handler_registry: Dict[str, Dict[str, Any]] = {}


def api_handler(
    body: Optional[Type] = None,
    method: str = "POST",
    path: Optional[str] = None,
    tags: Optional[List[str]] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
):
    """
    Register a handler function as an API intent

    @param body - Optional request model type for parameter validation
    @param method - HTTP method (GET, POST, PUT, DELETE, etc.)
    @param path - Custom path, defaults to /<function name>
    @param tags - API tags, defaults to the module name
    @param summary - API summary, defaults to the first docstring line
    @param description - API description
    """

    def decorator(func: F) -> F:
        func_name = getattr(func, "__name__", "unknown")
        func_module = getattr(func, "__module__", "")
        module_name = func_module.split(".")[-1] if func_module else "unknown"
        func_doc = getattr(func, "__doc__", None)

        _handler_registry[func_name] = {
            "func": func,
            "body": body,
            "method": method.upper(),
            "path": path or f"/{func_name}",
            "tags": tags or [module_name],
            "module": module_name,
            "summary": summary or (func_doc.split("\n")[0] if func_doc else func_name),
            "description": description or func_doc or "",
            "signature": inspect.signature(func),
        }

        # Keep original function unchanged
        return func

    return decorator


def get_registered_handlers() -> Dict[str, Dict[str, Any]]:
    """
    Get registered handler information (for debugging)

    @returns Handler registry
    """
    return _handler_registry.copy()


def success_response(data: Any = None, message: str = "") -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
        "timestamp": datetime.now().isoformat(),
    }


def error_response(error: Exception) -> Dict[str, Any]:
    """Envelope for a failed intent; domain errors keep their user-facing message"""
    if isinstance(error, NotiAppError):
        message = error.message
        field = getattr(error, "field", None)
    else:
        logger.error(f"Unexpected handler failure: {error}", exc_info=error)
        message = "Something went wrong. Please try again."
        field = None

    response: Dict[str, Any] = {
        "success": False,
        "message": message,
        "error": type(error).__name__,
        "timestamp": datetime.now().isoformat(),
    }
    if field:
        response["field"] = field
    return response


def register_fastapi_routes(app: "FastAPI", prefix: str = "/api") -> None:
    """
    Register all functions decorated with @api_handler as FastAPI routes

    @param app - FastAPI application instance
    @param prefix - Route prefix
    """
    logger.info(
        f"Starting FastAPI route registration, {len(_handler_registry)} handlers"
    )

    for handler_name, handler_info in _handler_registry.items():
        func = handler_info["func"]
        method = handler_info.get("method", "POST")
        path = handler_info.get("path", f"/{handler_name}")
        module = handler_info.get("module", "unknown")
        full_path = f"{prefix}{path}"

        route_params: Dict[str, Any] = {
            "path": full_path,
            "tags": handler_info.get("tags", []),
            "summary": handler_info.get("summary", handler_name),
            "description": handler_info.get("description", ""),
            "response_model": None,
        }

        if method == "GET":
            app.get(**route_params)(func)  # type: ignore
        elif method == "POST":
            app.post(**route_params)(func)  # type: ignore
        elif method == "PUT":
            app.put(**route_params)(func)  # type: ignore
        elif method == "DELETE":
            app.delete(**route_params)(func)  # type: ignore
        elif method == "PATCH":
            app.patch(**route_params)(func)  # type: ignore
        else:
            logger.warning(f"Unknown HTTP method: {method} for {handler_name}")
            continue

        logger.debug(
            f"✓ Registered route: {method} {full_path} ({handler_name} from {module})"
        )

    logger.info(
        f"FastAPI route registration completed: {len(_handler_registry)} routes"
    )


# Import all handler modules to trigger decorator registration
# Note: These imports must be after all decorator definitions to avoid circular imports
# ruff: noqa: E402
from . import auth, schedules, system

__all__ = [
    "api_handler",
    "register_fastapi_routes",
    "get_registered_handlers",
    "success_response",
    "error_response",
    "auth",
    "schedules",
    "system",
]
