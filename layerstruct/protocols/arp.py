'''
An ARP header consists of:

 * a hardware type (hrd) field,
 * a protocol type (pro) field,
 * a hardware address length (hln) field,
 * a protocol address length (pln) field,
 * an opcode (op) field,
 * a sender hardware address (sha) field,
 * a sender protocol address (spa) field,
 * a target hardware address (tha) field,
 * a target protocol address (tpa) field,
 * and a body.

Every field can also be accessed with a short alias (like 'src_mac') or
with a descriptive one (like 'sender_hw_addr').

    arp = ARP(src_mac='aa:bb:cc:dd:ee:ff', spa='10.0.0.1', dst_ip='10.0.0.2')
'''
from enum import IntEnum

from ..core import Header
from ..registry import registry
from .. import fields
from .eth import Eth
from .dot1q import Dot1q


class ArpOpcode(IntEnum):
    REQUEST = 1
    REPLY   = 2


class ARP(Header):
    hrd  = fields.Int16(default=1)
    pro  = fields.Int16(default=0x0800)
    hln  = fields.Int8(default=6)
    pln  = fields.Int8(default=4)
    op   = fields.Int16(default=ArpOpcode.REQUEST, enum=ArpOpcode)
    sha  = fields.MacAddrField()
    spa  = fields.IPAddrField()
    tha  = fields.MacAddrField()
    tpa  = fields.IPAddrField()
    body = fields.BodyField()

    class Meta:
        aliases = {
            'htype': 'hrd',
            'hardware_type': 'hrd',
            'ptype': 'pro',
            'protocol_type': 'pro',
            'hlen': 'hln',
            'hw_addr_len': 'hln',
            'plen': 'pln',
            'proto_addr_len': 'pln',
            'opcode': 'op',
            'src_mac': 'sha',
            'sender_hw_addr': 'sha',
            'src_ip': 'spa',
            'sender_proto_addr': 'spa',
            'dst_mac': 'tha',
            'target_hw_addr': 'tha',
            'dst_ip': 'tpa',
            'target_proto_addr': 'tpa',
        }


registry.add_header(ARP)
registry.bind(Eth, 'ethertype', 0x0806, ARP)
registry.bind(Dot1q, 'ethertype', 0x0806, ARP)
