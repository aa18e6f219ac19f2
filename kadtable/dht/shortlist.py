""" A per-query working set of candidate contacts, ordered by xor distance to the query target """
from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Set, Union

from kadtable.dht.contact import Contact, NetworkNode
from kadtable.dht.id import DHTID


class Shortlist:
    """
    An ordered collection of contacts without duplicate identifiers. Keeps insertion order until sorted.
    The shortlist has no capacity of its own: callers stop adding contacts once they have enough.

    :param target: the query identifier, contacts are sorted by xor distance to it
    :param contacts: optional initial contacts, added with append_unique
    """

    def __init__(self, target: DHTID, contacts: Iterable[Contact] = ()):
        self.target = target
        self.contacts: List[Contact] = []
        self._node_ids: Set[DHTID] = set()
        self.append_unique(contacts)

    def append_unique(self, contacts: Iterable[Contact]) -> int:
        """Add every contact whose identifier is not in the shortlist yet, return the number of added contacts"""
        num_added = 0
        for contact in contacts:
            if contact.node_id not in self._node_ids:
                self._node_ids.add(contact.node_id)
                self.contacts.append(contact)
                num_added += 1
        return num_added

    def sort(self, target: Optional[DHTID] = None) -> Shortlist:
        """Stable sort by ascending xor distance to :target: (by default, to the query target)"""
        if target is not None:
            self.target = target
        self.contacts.sort(key=lambda contact: self.target.xor_distance(contact.node_id))
        return self

    @property
    def node_ids(self) -> List[DHTID]:
        return [contact.node_id for contact in self.contacts]

    @property
    def nodes(self) -> List[NetworkNode]:
        return [contact.node for contact in self.contacts]

    def __len__(self) -> int:
        return len(self.contacts)

    def __iter__(self) -> Iterator[Contact]:
        return iter(self.contacts)

    def __getitem__(self, index: Union[int, slice]) -> Union[Contact, List[Contact]]:
        return self.contacts[index]

    def __contains__(self, item: Union[Contact, NetworkNode, DHTID]) -> bool:
        node_id = item if isinstance(item, DHTID) else item.node_id
        return node_id in self._node_ids

    def __repr__(self):
        return f"{self.__class__.__name__}(target={self.target!r}, contacts={self.contacts})"
