'''
Type-Length-Value attributes.

    +--------+--------+-----------------+
    |  type  | length |  value ...      |
    +--------+--------+-----------------+

The widths of type and length are one byte each by default; since they are
part of the schema, asking for different widths gives a subclass of TLV.
The length is always rewritten with the size of the value when packing.
'''
import logging
from typing import List

from ..core import Header
from ..properties import Dependency
from ..exceptions import SchemaError
from .. import fields


logger = logging.getLogger(__name__)

_int_fields = {
    1: fields.Int8,
    2: fields.Int16,
    4: fields.Int32,
    8: fields.Int64,
}


def _int_field(width):
    if isinstance(width, type) and issubclass(width, fields.StructField):
        return width()

    try:
        return _int_fields[width]()
    except KeyError:
        raise SchemaError(f'{width} is not a valid width for an integer field (use one of {list(_int_fields)})')


class TLV(Header):
    type   = fields.Int8()
    length = fields.Int8()
    value  = fields.StringField(Dependency('.length'))

    _variants = {}

    def __new__(cls, data=None, /, t=None, l=None, **options):
        tlv_cls = cls.variant(t, l) if t is not None or l is not None else cls

        return super().__new__(tlv_cls)

    def __init__(self, data=None, /, t=None, l=None, **options):
        super().__init__(data, **options)

    @classmethod
    def variant(cls, t=None, l=None):
        '''Return the TLV class with type and length fields of the given widths.'''
        t = cls._meta.prototypes['type'].size if t is None else t
        l = cls._meta.prototypes['length'].size if l is None else l

        type_field, length_field = _int_field(t), _int_field(l)
        if type_field.size == cls._meta.prototypes['type'].size and \
                length_field.size == cls._meta.prototypes['length'].size:
            return cls

        key = (cls, type_field.size, length_field.size)
        if key not in cls._variants:
            logger.debug('creating TLV variant with type of %d bytes and length of %d bytes' % key[1:])
            cls._variants[key] = type(cls)(f'{cls.__name__}{key[1]}{key[2]}', (cls,), {
                '__module__': cls.__module__,
                'type': type_field,
                'length': length_field,
            })

        return cls._variants[key]

    @classmethod
    def decode_all(cls, data, t=None, l=None) -> List['TLV']:
        '''Decode a sequence of TLVs one after the other.'''
        tlv_cls = cls.variant(t, l)
        data = bytes(data)

        result = []
        offset = 0
        while offset < len(data):
            tlv = tlv_cls()
            offset += tlv.unpack(data, offset)
            result.append(tlv)

        return result

    def to_human(self):
        self.update_dependencies()
        return 'type=%d,len=%d,value=%r' % (self.type.value, self.length.value, self.value.value)
