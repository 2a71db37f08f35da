"""Network helpers for URL shortener."""

import ipaddress
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def is_trusted_ip(ip: Optional[str], trusted_subnet: Optional[str]) -> bool:
    """Check whether an IP address lies within the trusted subnet.
    
    An empty subnet trusts nobody.
    
    Args:
        ip: Client IP (usually from X-Real-IP)
        trusted_subnet: CIDR notation, e.g. 192.168.1.0/24
        
    Returns:
        True if the address belongs to the subnet
    """
    if not trusted_subnet or not ip:
        return False
    
    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return False
    
    try:
        subnet = ipaddress.ip_network(trusted_subnet.strip(), strict=False)
    except ValueError as e:
        logger.error(f"Invalid trusted_subnet '{trusted_subnet}': {e}")
        return False
    
    return address.version == subnet.version and address in subnet
