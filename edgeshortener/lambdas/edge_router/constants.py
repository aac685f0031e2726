LAMBDA_NAME = 'edge_router'

# Logging event names
CONFIGURATION_FAILURE = 'CONFIGURATION_FAILURE'
MALFORMED_REQUEST = 'MALFORMED_REQUEST'
REQUEST_RECEIVED = 'REQUEST_RECEIVED'
