"""Reserved envelope types.

Keep these in one place to avoid stringly-typed message handling. The
string values are what travels on the wire; the master expects exactly
these spellings.
"""

# Client to master.

CLIENT_ADD = "daemon_client_add"
CLIENT_DELETE = "daemon_client_delete"
GET_CLIENTS = "daemon_get_clients"
GET_ACCOUNT_INFO = "daemon_get_account_info"
DO_REQUEST = "daemon_do_request"

# Either direction.

ACK = "daemon_ack"
PING = "daemon_ping"
PONG = "daemon_pong"

# Master to client.

REQUEST_RESULT = "daemon_request_result"
ACCOUNT_INFO = "daemon_account_info"
CLIENTS = "daemon_clients"

# Master to every registered client.

RELAY = "daemon_tracim_event"
CLIENT_ADDED = "daemon_client_added"
CLIENT_DELETED = "daemon_client_deleted"

# Internal only; never sent on the wire. GENERIC handlers fire for every
# inbound envelope, ERROR handlers receive per-connection failures.

GENERIC = "custom_message"
ERROR = "custom_error"
