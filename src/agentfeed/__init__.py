"""agentfeed: bounded, durable activity feed for multi-agent workflows."""

__version__ = "0.1.0"
