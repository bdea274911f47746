"""Sample data shared across LogShark tests."""

from logshark.records import LogRecord

HEADER = "client_address,timestamp,path,status_code,user_agent"

# 18 valid records. Failures over {404, 500}: 192.168.1.12 -> 4,
# 192.168.1.22 -> 5, 192.168.1.30 -> 3.
VALID_LINES = [
    "192.168.1.12,2024-03-01 10:00:05,/index.html,200,Mozilla/5.0",
    "192.168.1.12,2024-03-01 10:00:40,/login,404,Mozilla/5.0",
    "192.168.1.12,2024-03-01 10:01:10,/login,404,Mozilla/5.0",
    "192.168.1.12,2024-03-01 10:01:30,/admin,500,Mozilla/5.0",
    "192.168.1.12,2024-03-01 10:02:00,/admin,500,Mozilla/5.0",
    "192.168.1.22,2024-03-01 10:00:10,/index.html,200,curl/8.0",
    "192.168.1.22,2024-03-01 10:00:20,/wp-login.php,404,curl/8.0",
    "192.168.1.22,2024-03-01 10:00:21,/wp-login.php,404,curl/8.0",
    "192.168.1.22,2024-03-01 10:00:22,/xmlrpc.php,404,curl/8.0",
    "192.168.1.22,2024-03-01 10:01:23,/xmlrpc.php,500,curl/8.0",
    "192.168.1.22,2024-03-01 10:01:24,/xmlrpc.php,500,curl/8.0",
    "192.168.1.30,2024-03-01 10:02:00,/missing,404,python-requests/2.31",
    "192.168.1.30,2024-03-01 10:02:01,/missing,404,python-requests/2.31",
    "192.168.1.30,2024-03-01 10:02:02,/broken,500,python-requests/2.31",
    "192.168.1.30,2024-03-01 10:02:03,/index.html,403,python-requests/2.31",
    "10.0.0.5,2024-03-01 10:00:00,/index.html,200,Mozilla/5.0",
    "10.0.0.5,2024-03-01 10:01:00,/about,200,Mozilla/5.0",
    "10.0.0.5,2024-03-01 10:02:30,/index.html,304,",
]

MALFORMED_LINES = [
    "10.0.0.9,2024-03-01 10:03:00,/index.html,200",
    "10.0.0.9,2024-03-01 10:03:00,/index.html,999,curl/8.0",
    "10.0.0.9,03/01/2024 10:03,/index.html,200,curl/8.0",
]


def make_record(
    status_code: int = 200,
    client_address: str = "10.0.0.1",
    timestamp: str = "2024-03-01 10:00:00",
    path: str = "/",
    user_agent: str = "curl/8.0",
) -> LogRecord:
    return LogRecord(
        client_address=client_address,
        timestamp=timestamp,
        path=path,
        status_code=status_code,
        user_agent=user_agent,
    )
