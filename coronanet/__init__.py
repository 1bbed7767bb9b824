# Re-export the public API.

from .event_loader import get_event
from .scores_loader import get_policy_scores
from .filters import InvalidFilterError, compile_event_query, compile_scores_query
from .http_utils import CoronaNetAPIError
