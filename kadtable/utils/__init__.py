from kadtable.utils.logging import get_logger, use_kadtable_log_style
from kadtable.utils.networking import LOCALHOST, IPAddress, parse_ip, parse_port
from kadtable.utils.serializer import MSGPackSerializer
from kadtable.utils.timed import get_dht_time
