'''
IEEE 802.1Q tag: once the outer frame has ethertype 0x8100 the body starts
with the tag control information followed by the real ethertype.

    +-----+-----+--------------+-----------+
    | PCP | DEI |     VID      | ethertype |
    |  3  |  1  |     12       |    16     |
    +-----+-----+--------------+-----------+
'''
from ..core import Header
from ..registry import registry
from .. import fields
from .eth import Eth


class Dot1q(Header):
    tci       = fields.BitField(2, [
        ('pcp', 3),
        ('dei', 1),
        ('vid', 12),
    ])
    ethertype = fields.Int16()
    body      = fields.BodyField()

    class Meta:
        aliases = {
            'type': 'ethertype',
        }


registry.add_header(Dot1q)
registry.bind(Eth, 'ethertype', 0x8100, Dot1q)
