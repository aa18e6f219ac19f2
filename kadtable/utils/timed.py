import time

get_dht_time = time.time  # a global (weakly synchronized) time
