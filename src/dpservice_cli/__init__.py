"""dpservice-cli: command-line client for the dpservice dataplane.

Talks gRPC to a running dpservice daemon and manages its interfaces,
virtual IPs, prefixes, routes, load balancers and NAT mappings.
"""

from dpservice_cli.version import __version__

__all__: list[str] = ["__version__"]
