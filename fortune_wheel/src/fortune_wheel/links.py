from typing import Optional, Tuple
from urllib.parse import parse_qs, urlencode, urlsplit


def spin_link(base_url: str, wheel_id: str) -> str:
    """Public link anyone can use to spin the wheel."""
    return f"{base_url.rstrip('/')}/spin/{wheel_id}"


def edit_link(base_url: str, wheel_id: str, edit_key: str) -> str:
    """Private link carrying both tokens; share only with editors."""
    query = urlencode({"wheelId": wheel_id, "editKey": edit_key})
    return f"{base_url.rstrip('/')}/builder?{query}"


def parse_edit_link(url: str) -> Optional[Tuple[str, str]]:
    params = parse_qs(urlsplit(url).query)
    wheel_id = (params.get("wheelId") or [""])[0]
    edit_key = (params.get("editKey") or [""])[0]
    if not wheel_id or not edit_key:
        return None
    return wheel_id, edit_key
