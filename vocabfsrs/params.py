"""
Parameter-set resolution and loading.

A learner may carry a parameter set per deck (wordbook) and a global one; when
neither exists the documented default applies.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ParameterFileError
from .models import SchedulerParams

logger = logging.getLogger(__name__)

# Keys of a stored parameter document that map onto SchedulerParams. Stored
# documents also carry bookkeeping (user ids, timestamps) that is ignored.
_PARAM_KEYS = frozenset(
    {
        "w",
        "weights",
        "requestRetention",
        "request_retention",
        "maximumInterval",
        "maximum_interval",
        "enableFuzz",
        "enable_fuzz",
    }
)

StoreKey = Tuple[str, Optional[str]]


def params_from_document(document: Mapping[str, Any]) -> SchedulerParams:
    """
    Build SchedulerParams from a stored parameter document.

    Raises:
        pydantic.ValidationError: If the recognised values are invalid.
    """
    data = {k: v for k, v in document.items() if k in _PARAM_KEYS}
    return SchedulerParams.model_validate(data)


def load_params_file(file_path: Path) -> SchedulerParams:
    """
    Read a YAML (or JSON) parameter document from disk.

    Parameters:
        file_path (Path): Path to the document.

    Returns:
        SchedulerParams: The validated parameter set.

    Raises:
        ParameterFileError: If the file is missing or unreadable, is not valid
            YAML, is not a mapping, or holds invalid parameter values.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
        raw = yaml.safe_load(content)
    except FileNotFoundError:
        raise ParameterFileError(
            f"Parameter file not found: {file_path}"
        ) from None
    except IOError as e:
        raise ParameterFileError(
            f"Could not read parameter file {file_path}: {e}", e
        ) from e
    except yaml.YAMLError as e:
        raise ParameterFileError(
            f"Invalid YAML syntax in {file_path}: {e}", e
        ) from e

    if not isinstance(raw, dict):
        raise ParameterFileError(
            f"Top level of {file_path} must be a mapping of parameters."
        )

    try:
        params = params_from_document(raw)
    except ValidationError as e:
        error_details = e.errors()[0]
        field = ".".join(map(str, error_details["loc"]))
        msg = error_details["msg"]
        raise ParameterFileError(
            f"Validation error in {file_path} field '{field}': {msg}", e
        ) from e

    logger.debug(f"Loaded parameter set from {file_path}")
    return params


class ParameterStore:
    """
    In-memory registry of parameter sets keyed by (user_id, deck_id).

    A deck_id of None denotes the user's global parameter set.
    """

    def __init__(self, default: Optional[SchedulerParams] = None):
        self.default = default if default is not None else SchedulerParams()
        self._params: Dict[StoreKey, SchedulerParams] = {}

    def set(
        self,
        user_id: str,
        params: SchedulerParams,
        deck_id: Optional[str] = None,
    ) -> None:
        self._params[(user_id, deck_id)] = params

    def get(
        self, user_id: str, deck_id: Optional[str] = None
    ) -> Optional[SchedulerParams]:
        """Exact lookup, no fallback."""
        return self._params.get((user_id, deck_id))

    def remove(self, user_id: str, deck_id: Optional[str] = None) -> None:
        self._params.pop((user_id, deck_id), None)

    def __len__(self) -> int:
        return len(self._params)

    def resolve(
        self, user_id: str, deck_id: Optional[str] = None
    ) -> SchedulerParams:
        return resolve_params(self, user_id, deck_id)


def resolve_params(
    store: ParameterStore, user_id: str, deck_id: Optional[str] = None
) -> SchedulerParams:
    """
    Select the parameter set for a user and deck.

    Order: the deck-specific set, then the user's global set, then the store's
    default.
    """
    if deck_id is not None:
        params = store.get(user_id, deck_id)
        if params is not None:
            return params

    params = store.get(user_id)
    if params is not None:
        return params

    logger.debug(
        f"No parameter set for user {user_id!r} (deck {deck_id!r}); using default"
    )
    return store.default
