from ..core import Header
from ..registry import registry
from .. import fields


class Eth(Header):
    '''Ethernet II frame, the ethertype tells what the body contains.'''
    dst       = fields.MacAddrField()
    src       = fields.MacAddrField()
    ethertype = fields.Int16()
    body      = fields.BodyField()

    class Meta:
        aliases = {
            'dst_mac': 'dst',
            'src_mac': 'src',
            'type': 'ethertype',
        }


registry.add_header(Eth)
