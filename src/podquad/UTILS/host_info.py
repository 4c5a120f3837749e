"""
Utilities describing the host the services run on.
"""
import ipaddress
import socket
from typing import Optional

import psutil


def get_primary_ipv4() -> Optional[str]:
    """
    Finds the first global IPv4 address of the host.

    :return: The address, or None when the host has no global IPv4 address.
    """
    for addrs in psutil.net_if_addrs().values():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            ip = ipaddress.ip_address(addr.address)
            if ip.is_loopback or ip.is_link_local:
                continue
            return addr.address
    return None
