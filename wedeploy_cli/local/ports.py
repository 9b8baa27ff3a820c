"""TCP port availability checks"""

import socket
from typing import Iterable, List


def is_port_available(port: int, host: str = "") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def unavailable_ports(ports: Iterable[int], check=is_port_available) -> List[int]:
    """Return the ports that can not be bound, in the given order."""
    return [port for port in ports if not check(port)]
