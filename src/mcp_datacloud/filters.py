"""Filter cleaning and query-string helpers."""
from typing import Any, Dict, Iterable, Mapping, Optional
from urllib.parse import quote

from .sql_escape import to_text

# Characters left unencoded in addition to letters, digits and "_.-~"
_URI_COMPONENT_SAFE = "!'()*"


def _is_present(value: Any) -> bool:
    # Only None and the exact empty string are absent; 0, False and [] are kept.
    return value is not None and not (isinstance(value, str) and value == "")


def clean_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a new dict without the None and empty-string entries of filters."""
    if not filters:
        return {}
    return {key: value for key, value in filters.items() if _is_present(value)}


def build_query_params(params: Mapping[str, Any], base_params: Iterable[str] = ()) -> str:
    """
    Build a URL query string from base parameters and a parameter mapping.

    Base parameters are kept as given and come first. Each present value in
    params is appended as key=value with the value percent-encoded as a URI
    component. No leading "?" is added.
    """
    segments = list(base_params)
    for key, value in params.items():
        if _is_present(value):
            segments.append(f"{key}={quote(to_text(value), safe=_URI_COMPONENT_SAFE)}")
    return "&".join(segments)
