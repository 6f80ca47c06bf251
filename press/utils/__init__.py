from press.utils.helpers import client_ip, local_timestamp, route_label

__all__ = ["client_ip", "local_timestamp", "route_label"]
