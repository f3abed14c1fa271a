# Error codes / log events of the shorten_url Lambda
INVALID_JSON = 'INVALID_JSON'
MISSING_URL = 'MISSING_URL'
MISSING_CLIENT_ID = 'MISSING_CLIENT_ID'
INVALID_URL = 'INVALID_URL'
DOMAIN_REJECTED = 'DOMAIN_REJECTED'
INVALID_ALIAS = 'INVALID_ALIAS'
INVALID_EXPIRY = 'INVALID_EXPIRY'
ALIAS_IN_USE = 'ALIAS_IN_USE'
RATE_LIMIT_EXCEEDED = 'RATE_LIMIT_EXCEEDED'
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
