"""
Pytest 共用 fixtures
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# 專案根目錄加入路徑
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.data_manager import DataManager
from server import create_app


SAMPLE_LOG = """/rdsdbbin/mysql/bin/mysqld, Version: 8.0.35 (Source distribution). started with:
Tcp port: 3306  Unix socket: /tmp/mysql.sock
Time                 Id Command    Argument
# Time: 2024-01-01T10:00:00.000000Z
# User@Host: app[app] @ [10.0.0.1]  Id: 5
# Query_time: 1.500000  Lock_time: 0.000100  Rows_sent: 1  Rows_examined: 100
use shop;
SET timestamp=1704103200;
SELECT * FROM users WHERE id = 42;
# Time: 2024-01-01T10:05:00.000000Z
# User@Host: app[app] @ [10.0.0.1]  Id: 6
# Query_time: 2.500000  Lock_time: 0.000200  Rows_sent: 1  Rows_examined: 200
SET timestamp=1704103500;
SELECT * FROM users WHERE id = 43;
# Time: 2024-01-03T12:00:00.000000Z
# User@Host: report[report] @ [10.0.0.2]  Id: 7
# Query_time: 4.000000  Lock_time: 0.000000  Rows_sent: 10  Rows_examined: 5000
SET timestamp=1704283200;
SELECT name, total
FROM orders
WHERE status = 'paid';
"""

HEADER_ONLY_LOG = """/rdsdbbin/mysql/bin/mysqld, Version: 8.0.35 (Source distribution). started with:
Tcp port: 3306  Unix socket: /tmp/mysql.sock

Time                 Id Command    Argument

"""

USERS_TEMPLATE = "SELECT * FROM users WHERE id = ?;"
ORDERS_TEMPLATE = "SELECT name, total FROM orders WHERE status = '?';"


@pytest.fixture
def sample_log():
    return SAMPLE_LOG


@pytest.fixture
def header_only_log():
    return HEADER_ONLY_LOG


@pytest.fixture
def data_manager():
    """全新的 DataManager"""
    return DataManager(sort_key="total_time", sort_direction="desc")


@pytest.fixture
def loaded_manager(data_manager):
    """已載入範例 LOG 的 DataManager"""
    data_manager.add_files([("slow.log", SAMPLE_LOG)])
    return data_manager


@pytest.fixture
def client(data_manager):
    """使用獨立 DataManager 的測試用 client"""
    with TestClient(create_app(data_manager)) as test_client:
        yield test_client
