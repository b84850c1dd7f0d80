from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse


def _count(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _total_messages(row: Dict[str, Any]) -> Optional[float]:
    total = _count(row.get("total_messages"))
    if total is not None:
        return total

    bot = _count(row.get("total_bot_messages", row.get("assistant_messages")))
    user = _count(row.get("total_user_messages", row.get("user_messages")))
    if bot is None and user is None:
        return None
    return (bot or 0) + (user or 0)


def _is_localhost(domain: Optional[str]) -> bool:
    normalized = (domain or "").strip().lower()
    if not normalized:
        return False

    host = normalized
    if "://" in normalized or "/" in normalized:
        candidate = normalized if "://" in normalized else f"http://{normalized}"
        try:
            host = urlparse(candidate).hostname or normalized
        except ValueError:
            host = normalized

    return host == "localhost" or host.startswith("localhost:")


def should_exclude_dev_session(row: Dict[str, Any]) -> bool:
    total = _total_messages(row)
    if total is not None and total <= 0:
        return True
    if _is_localhost(row.get("domain")):
        return True
    ip = (row.get("ip_address") or "").strip()
    return ip == "::1" and row.get("is_dev") is True


def filter_dev_sessions(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [row for row in rows if not should_exclude_dev_session(row)]
