"""Unsplash photo search client."""

from config import API_CONFIG
from data_sources.upstream import get_json

_PROVIDER = "Unsplash"


def search_photos(query, per_page=5, orientation="landscape"):
    """Search photos by free text. Returns the ``results`` list, possibly empty."""
    cfg = API_CONFIG["unsplash"]
    params = {"query": query, "per_page": per_page, "orientation": orientation}
    headers = {"Authorization": f"Client-ID {cfg['key']}"}
    data = get_json(_PROVIDER, f"{cfg['base_url']}/search/photos", params=params, headers=headers,
                    not_found_message="No images available for this city")
    return data.get("results") or []
