"""Proxy — forwards resolved requests to their upstream cluster."""

from figway.proxy.forwarder import HOP_BY_HOP, Forwarder, strip_hop_by_hop

__all__ = ["HOP_BY_HOP", "Forwarder", "strip_hop_by_hop"]
