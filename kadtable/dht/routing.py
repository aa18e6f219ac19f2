""" The routing table of a DHT node: known contacts bucketed by their xor distance to the local node id """
from __future__ import annotations

import threading
from typing import Collection, Iterator, List, Optional, Tuple, Union

from kadtable.dht.constants import BUCKET_SIZE, NUM_BUCKETS, T_REFRESH
from kadtable.dht.contact import Contact, NetworkNode
from kadtable.dht.id import DHTID, BinaryDHTID, generate_id_in_bucket, get_bucket_index
from kadtable.dht.options import RoutingTableOptions, resolve_self_node
from kadtable.dht.shortlist import Shortlist
from kadtable.utils.logging import get_logger
from kadtable.utils.timed import get_dht_time

logger = get_logger(__name__)

NodeRef = Union[NetworkNode, Contact, DHTID, BinaryDHTID]


class RoutingTable:
    """
    A data structure that contains DHT contacts bucketed according to their distance to the local node id.
    Follows Kademlia routing table as described in https://pdos.csail.mit.edu/~petar/papers/maymounkov-kademlia-lncs.pdf
    with a fixed array of NUM_BUCKETS buckets: bucket i holds contacts at xor distance [2 ** i, 2 ** (i + 1)).

    All public methods are thread-safe: they hold a single table-wide lock for their entire duration.

    :param node: the local node, used to measure distance. It is never added to its own table
    :param bucket_size: parameter $k$ from Kademlia paper Section 2.2, maximum contacts per bucket
    :note: when a bucket is full, newly seen contacts are dropped and the older contacts are kept as they are.
      Unlike Section 2.2 of the paper, the least-recently seen contact is not pinged before dropping a newcomer.
    """

    def __init__(self, node: NetworkNode, bucket_size: int = BUCKET_SIZE):
        assert bucket_size > 0, "bucket_size must be positive"
        self.node, self.bucket_size = node, bucket_size
        self._buckets = tuple(KBucket(index, bucket_size) for index in range(NUM_BUCKETS))
        self._lock = threading.Lock()

    @classmethod
    def create(cls, options: RoutingTableOptions, bucket_size: int = BUCKET_SIZE) -> RoutingTable:
        """
        Create a routing table for the local node described by options

        :raises ConfigurationError: if ip or port is missing or malformed; no table is created in that case
        :raises IdentifierGenerationError: if options.node_id is missing and no random id could be generated
        """
        node = resolve_self_node(options)
        logger.info(f"Created routing table for {node} with {NUM_BUCKETS} buckets of size {bucket_size}")
        return cls(node, bucket_size=bucket_size)

    @property
    def node_id(self) -> DHTID:
        return self.node.node_id

    def get_bucket_index(self, node_id: Union[DHTID, BinaryDHTID]) -> int:
        """Get the index of the bucket that the given node would fall into."""
        with self._lock:
            return get_bucket_index(self.node.node_id, node_id)

    def add_node(self, node: Union[NetworkNode, Contact]) -> bool:
        """
        Update routing table after an incoming request from :node: or a response that mentions :node:

        :returns: True if the node was stored; False if it is the local node, is already known (the address
          stored earlier is kept) or its bucket is full (the node is dropped, existing contacts stay untouched)
        """
        contact = node if isinstance(node, Contact) else Contact(node)
        with self._lock:
            if contact.node_id == self.node.node_id:
                return False
            bucket = self._buckets[get_bucket_index(self.node.node_id, contact.node_id)]
            stored = bucket.add_node(contact)
            if not stored and contact.node_id not in bucket:
                logger.debug(f"Bucket {bucket.index} is full, dropping {contact.node}")
            return stored

    def get_closest_contacts(
        self, count: int, target: Union[DHTID, BinaryDHTID], ignored_nodes: Collection[NodeRef] = ()
    ) -> Shortlist:
        """
        Find up to :count: known contacts that are nearest to :target: according to xor distance.

        Buckets are visited starting from the one :target: falls into, then alternating outwards
        (home, home + 1, home - 1, home + 2, ...) until :count: contacts are collected or all buckets are visited.

        :param count: find this many contacts. If there aren't enough contacts in the table, returns all of them
        :param target: identifier of the node or key to search for
        :param ignored_nodes: contacts (or their identifiers) that must not appear in the result
        :return: a shortlist of up to count contacts sorted from nearest to farthest
        """
        target = _as_dhtid(target)
        ignored_ids = {_as_dhtid(ignored) for ignored in ignored_nodes}
        shortlist = Shortlist(target)

        with self._lock:
            left_to_add = count
            for index in self.get_probe_order(get_bucket_index(self.node.node_id, target)):
                if left_to_add <= 0:
                    break
                for contact in self._buckets[index].contacts:
                    if contact.node_id in ignored_ids:
                        continue
                    left_to_add -= shortlist.append_unique([contact])
                    if left_to_add == 0:
                        break

        return shortlist.sort()

    @staticmethod
    def get_probe_order(home_index: int) -> Iterator[int]:
        """Iterate over all bucket indices by distance to home_index, ties are broken in favor of larger index"""
        yield home_index
        for offset in range(1, NUM_BUCKETS):
            if home_index + offset < NUM_BUCKETS:
                yield home_index + offset
            if home_index - offset >= 0:
                yield home_index - offset

    def mark_node_as_seen(self, node_id: Union[DHTID, BinaryDHTID]) -> bool:
        """
        Record that :node_id: has just responded: move it to the tail of its bucket and update its last_seen time

        :returns: True if the node is in the table, False otherwise
        """
        node_id = _as_dhtid(node_id)
        with self._lock:
            return self._buckets[get_bucket_index(self.node.node_id, node_id)].mark_as_seen(node_id)

    def remove_node(self, node_id: Union[DHTID, BinaryDHTID]) -> Contact:
        """Remove a node from the table (e.g. after it stopped responding), raise KeyError if it is unknown"""
        node_id = _as_dhtid(node_id)
        with self._lock:
            bucket = self._buckets[get_bucket_index(self.node.node_id, node_id)]
            contact = bucket.pop(node_id)
        logger.debug(f"Removed {contact.node} from bucket {bucket.index}")
        return contact

    def get(self, node_id: Union[DHTID, BinaryDHTID], default=None) -> Optional[Contact]:
        """Find the contact stored for node_id"""
        node_id = _as_dhtid(node_id)
        with self._lock:
            return self._buckets[get_bucket_index(self.node.node_id, node_id)].get(node_id, default)

    def get_bucket(self, index: int) -> Tuple[Contact, ...]:
        """A snapshot of the contacts in bucket :index:, oldest first"""
        with self._lock:
            return tuple(self._buckets[index].contacts)

    def get_bucket_size(self, index: int) -> int:
        with self._lock:
            return len(self._buckets[index])

    def get_total_known_nodes(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets)

    def get_stale_buckets(self, refresh_period: float = T_REFRESH, now: Optional[float] = None) -> List[int]:
        """Indices of the buckets that were not updated for more than refresh_period seconds"""
        staleness_threshold = (get_dht_time() if now is None else now) - refresh_period
        with self._lock:
            return [bucket.index for bucket in self._buckets if bucket.last_updated < staleness_threshold]

    def generate_refresh_id(self, index: int) -> DHTID:
        """A random identifier in bucket :index:, searching for it finds new contacts for that bucket"""
        with self._lock:
            return generate_id_in_bucket(self.node.node_id, index)

    def reset_refresh_time(self, index: int) -> None:
        with self._lock:
            self._buckets[index].last_updated = get_dht_time()

    def __len__(self) -> int:
        return self.get_total_known_nodes()

    def __contains__(self, item: NodeRef) -> bool:
        return self.get(item) is not None

    def __getitem__(self, node_id: Union[DHTID, BinaryDHTID]) -> Contact:
        contact = self.get(node_id)
        if contact is None:
            raise KeyError(f"RoutingTable does not contain node id={node_id}")
        return contact

    def __setitem__(self, node_id: DHTID, node: NetworkNode) -> NotImplementedError:
        raise NotImplementedError("RoutingTable doesn't support direct item assignment. Use table.add_node instead")

    def __delitem__(self, node_id: Union[DHTID, BinaryDHTID]):
        self.remove_node(node_id)

    def __repr__(self):
        with self._lock:
            bucket_info = "\n".join(repr(bucket) for bucket in self._buckets if len(bucket) > 0)
        return (
            f"{self.__class__.__name__}(node={self.node}, bucket_size={self.bucket_size},"
            f"\nbuckets=[\n{bucket_info}])"
        )


class KBucket:
    """
    A bucket containing up to :size: contacts, oldest first. Not thread-safe on its own, RoutingTable guards it.
    """

    def __init__(self, index: int, size: int):
        self.index, self.size = index, size
        self.contacts: List[Contact] = []
        self.last_updated = get_dht_time()

    def add_node(self, contact: Contact) -> bool:
        """
        Append a contact unless a contact with the same id is already present. If that overflows the bucket,
        the newcomer is removed again: a full bucket prefers its long-lived contacts.

        :returns: True if the contact was stored, False otherwise
        :note: this function has a side-effect of resetting KBucket.last_updated time
        """
        self.last_updated = get_dht_time()
        if self._find(contact.node_id) is not None:
            return False
        self.contacts.append(contact)
        if len(self.contacts) > self.size:
            self.contacts.pop()
            return False
        return True

    def mark_as_seen(self, node_id: DHTID) -> bool:
        position = self._find(node_id)
        if position is None:
            return False
        self.contacts.append(self.contacts.pop(position).seen())
        self.last_updated = get_dht_time()
        return True

    def get(self, node_id: DHTID, default=None) -> Optional[Contact]:
        position = self._find(node_id)
        return default if position is None else self.contacts[position]

    def pop(self, node_id: DHTID) -> Contact:
        position = self._find(node_id)
        if position is None:
            raise KeyError(f"KBucket does not contain node id={node_id}")
        self.last_updated = get_dht_time()
        return self.contacts.pop(position)

    def _find(self, node_id: DHTID) -> Optional[int]:
        for position, contact in enumerate(self.contacts):
            if contact.node_id == node_id:
                return position
        return None

    def __contains__(self, node_id: DHTID) -> bool:
        return self._find(node_id) is not None

    def __len__(self) -> int:
        return len(self.contacts)

    def __repr__(self):
        return f"{self.__class__.__name__}(index={self.index}, {len(self.contacts)} nodes, max size={self.size})"


def _as_dhtid(item: NodeRef) -> DHTID:
    if isinstance(item, (NetworkNode, Contact)):
        return item.node_id
    if isinstance(item, DHTID):
        return item
    return DHTID.from_bytes(item)
