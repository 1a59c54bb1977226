"""cdnopt: rank candidate IPs for a node link by TCP connect latency."""

__version__ = "0.1.0"
