"""
System module command handlers
"""

from typing import Any, Dict

from notiapp_backend.system.runtime import get_runtime_stats

from . import api_handler, success_response


@api_handler(method="GET", path="/system/stats")
async def get_system_stats() -> Dict[str, Any]:
    """Get runtime status

    @returns Backend, session and engine summary
    """
    stats = await get_runtime_stats()
    return success_response(stats)
