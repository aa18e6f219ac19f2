"""
The routing table core of a Kademlia [1] distributed hash table.

The code is organized as follows:

 * **class RoutingTable (routing.py)** - thread-safe table of known contacts, split into one bucket per bit of the id.
 * **class Shortlist (shortlist.py)** - a deduplicated set of candidate contacts sorted by distance to a query target.
 * **class DHTID, get_bucket_index (id.py)** - node identifiers and the xor metric that assigns them to buckets.
 * **class NetworkNode, Contact (contact.py)** - where to reach a node and what the table remembers about it.
 * **class RoutingTableOptions (options.py)** - construction options of the local node.

Transport, iterative lookups and key-value storage are built on top of this package by the caller.

- [1] Maymounkov P., Mazieres D. (2002) Kademlia: A Peer-to-Peer Information System Based on the XOR Metric.
"""

from kadtable.dht.constants import (
    ALPHA,
    BUCKET_SIZE,
    ID_NBYTES,
    NUM_BUCKETS,
    T_EXPIRE,
    T_REFRESH,
    T_REPLICATE,
    T_REPUBLISH,
)
from kadtable.dht.contact import Contact, NetworkNode
from kadtable.dht.id import DHTID, IdentifierGenerationError, generate_id_in_bucket, get_bucket_index
from kadtable.dht.options import ConfigurationError, RoutingTableOptions
from kadtable.dht.routing import KBucket, RoutingTable
from kadtable.dht.shortlist import Shortlist
