"""Asyncio networking utilities: packet buffers, connections, a simulated bridge, UDP listeners, marshalling bases and interface listing."""

__version__ = "0.1.0"
__all__ = [
    "errors",
    "fixed_big_int",
    "buffer",
    "conn",
    "bridge",
    "udp_listener",
    "marshal",
    "ifaces",
]