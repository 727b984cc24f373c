"""Response envelopes shared by every endpoint"""
from typing import Any, Dict, List, Optional

from educonnect.utils.pagination import total_pages


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    return {"success": True, "data": data, "message": message}


def paginated_response(data: List[Any], total: int, page: int, limit: int, **extra: Any) -> Dict[str, Any]:
    """List envelope; extra keys (e.g. unread_count) are merged at the top level"""
    return {
        "success": True,
        "data": data,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages(total, limit),
        **extra,
    }
