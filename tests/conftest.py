import pytest

from kadtable.dht import DHTID, NetworkNode, RoutingTable
from kadtable.utils.logging import get_logger, use_kadtable_log_style
from kadtable.utils.networking import LOCALHOST

use_kadtable_log_style("everywhere")
logger = get_logger(__name__)


@pytest.fixture
def zero_table() -> RoutingTable:
    return RoutingTable(NetworkNode(bytes(DHTID.HASH_NBYTES), LOCALHOST, 1337))
