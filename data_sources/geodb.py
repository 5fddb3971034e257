"""GeoDB Cities (RapidAPI) client."""

from config import API_CONFIG
from data_sources.upstream import get_json

_PROVIDER = "GeoDB"


def search_cities(city, country=None, limit=1):
    """Cities whose name starts with ``city``, most populous first.

    Returns the list under the response's ``data`` key, possibly empty.
    """
    cfg = API_CONFIG["geodb"]
    params = {
        "namePrefix": city,
        "countryIds": country,
        "limit": limit,
        "sort": "-population",
    }
    headers = {
        "X-RapidAPI-Key": cfg["key"],
        "X-RapidAPI-Host": cfg["host"],
    }
    data = get_json(_PROVIDER, f"{cfg['base_url']}/geo/cities", params=params, headers=headers,
                    not_found_message="City not found")
    return data.get("data") or []
