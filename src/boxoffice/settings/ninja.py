from decouple import config

NINJA_EXTRA = {
    "NUM_PROXIES": None,
}

# Upper bound on the rows a single ticket listing returns.
TICKET_LIST_MAX_RESULTS = config("TICKET_LIST_MAX_RESULTS", default=500, cast=int)
