"""
Concrete headers; importing this package registers them, together with
their bindings, into the default registry.
"""
from .eth import Eth
from .dot1q import Dot1q
from .arp import ARP, ArpOpcode
