# Shared helpers: logging, token storage, OAuth flow, dates
