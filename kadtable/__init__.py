from kadtable.dht import *
from kadtable.utils import *

__version__ = "0.1.0"
