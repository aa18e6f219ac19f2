""" Protocol constants shared by the routing table and the layers built around it (transport, lookup, storage) """

ID_NBYTES = 20  # node identifiers and keys are SHA1-sized
NUM_BUCKETS = ID_NBYTES * 8  # parameter $b$: one bucket per bit of the identifier
BUCKET_SIZE = 20  # parameter $k$: maximum contacts per bucket
ALPHA = 3  # number of parallel requests issued by the iterative lookup

# timings of the surrounding key-value store, in seconds; the routing table uses only T_REFRESH
T_EXPIRE = 86410  # a key-value pair expires this long after its original publication
T_REFRESH = 3600  # an otherwise unaccessed bucket must be refreshed after this long
T_REPLICATE = 3600  # interval between replication events, when a node publishes its entire database
T_REPUBLISH = 86400  # the original publisher must republish a key-value pair after this long
