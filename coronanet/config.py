# coronanet/config.py
import os

# ---------- SERVICE ----------

# PostgREST root serving the CoronaNet tables (3000 is the PostgREST default port)
API_URL = os.getenv("CORONANET_API_URL", "http://localhost:3000")

try:
    API_TIMEOUT = float(os.getenv("CORONANET_API_TIMEOUT", "9"))
except ValueError:
    raise RuntimeError(
        "CORONANET_API_TIMEOUT must be a number of seconds."
    ) from None

EVENT_RESOURCE = "public_release"
SCORES_RESOURCE = "policy_intensity"

# ---------- FILTERS ----------

# Sentinel meaning "no constraint on this filter"
ALL = "All"

DEFAULT_EVENT_COLUMNS = (
    "record_id", "policy_id",
    "entry_type", "update_type",
    "update_level", "update_level_var",
    "date_announced",
    "date_start", "date_end", "date_end_spec",
    "country", "init_country_level", "province",
    "target_init_same", "target_country",
    "target_province", "target_city", "target_intl_org",
    "target_other", "target_who_what", "target_who_gen",
    "target_direction", "compliance", "enforcer",
    "city", "type", "type_sub_cat", "description",
)

# Policy types whose type_sub_cat column is never populated
NO_SUBTYPE_TYPES = frozenset({
    "Internal Border Restrictions",
    "Lockdown",
    "Anti-Disinformation Measures",
    "Other Policy Not Listed Above",
    "Declaration of Emergency",
})

# ---------- DEFAULT WINDOWS ----------

EVENT_START = "2019-12-31"
EVENT_END = "2022-01-01"

SCORES_START = "2019-12-31"
SCORES_END = "2021-07-01"
