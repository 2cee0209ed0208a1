"""
A Field is "fundamental" datatype from the header point of view, something directly
encodable/decodable: it owns a value and knows how many bytes it takes on the wire.
"""
import logging
import string
import struct
from typing import Dict, Tuple

from bitstring import Bits, pack as bitstring_pack

from .meta import FieldBase, Endianess
from .properties import Dependency, PropertyDescriptor
from .exceptions import EncodeError, FormatError, ParseError, SchemaError


logger = logging.getLogger(__name__)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None):
        super().__init__()
        self.name = name
        self.father = father
        self.default = default

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return self.to_human()

    def get_dependencies(self) -> Dict[str, Dependency]:
        """Return the dictionary containing as key the attribute depending on another field"""
        instance_dict = self.__dict__
        return {_k: _v for _k, _v in instance_dict.items() if isinstance(_v, Dependency)}

    def update_dependencies(self):
        '''This is used to update the fields we depend on before packing'''
        pass

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    @property
    def fixed_size(self):
        '''The size on the wire when it doesn't depend on the value, None otherwise.'''
        return None

    @property
    def raw(self) -> bytes:
        return self.pack()

    def _check_available(self, data, offset, n):
        available = len(data) - offset
        if available < n:
            raise ParseError(
                f'{self.__class__.__name__} needs {n} bytes but only {max(available, 0)} are available',
                chain=[])

    def decode(self, data: bytes, offset: int = 0) -> Tuple[object, int]:
        '''Return the value contained in data starting at offset and how many bytes
        have been consumed; the field itself is not modified.'''
        raise NotImplementedError('you need to implement this in the subclass')

    def encode(self, value=None) -> bytes:
        raise NotImplementedError('you need to implement this in the subclass')

    def unpack(self, data: bytes, offset: int = 0) -> int:
        value, consumed = self.decode(data, offset)
        self.value = value

        return consumed

    def pack(self) -> bytes:
        return self.encode()

    def to_human(self) -> str:
        return str(self.value)

    def from_human(self, text: str):
        self.value = text
        return self


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    unsigned integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.IntEnum so to have directly a representation of the integer value of the field itself.
    """
    FORMATS = 'BHIQ'

    def __init__(self, format, default=0, endianess=Endianess.BIG_ENDIAN, enum=None, **kw):
        if len(format) != 1 or format not in self.FORMATS:
            raise SchemaError(f"'{format}' is not a supported format (use one of '{self.FORMATS}')")

        self.format = format
        self.endianess = endianess
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.to_human())

    def __int__(self):
        return int(self.value)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    @property
    def fixed_size(self):
        return self.size

    def _set_value(self, value) -> None:
        if isinstance(value, str):
            value = self._from_text(value)
        elif self.enum and isinstance(value, int) and not isinstance(value, self.enum):
            value = self._to_enum(value)

        self._value = value

    def _from_text(self, text):
        if self.enum and text in self.enum.__members__:
            return self.enum[text]

        try:
            return int(text, 0)
        except ValueError:
            raise FormatError(f"'{text}' is not a valid integer", chain=[])

    def _to_enum(self, value):
        try:
            return self.enum(value)
        except ValueError:
            return value

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            logger.warning(f'enum {self.enum.__name__} doesn\'t have element with value 0x{value:x} in it')
            return value

    def decode(self, data, offset=0):
        size = self.size
        self._check_available(data, offset, size)

        value = struct.unpack_from(self.get_format(), data, offset)[0]
        if self.enum:
            value = self._unpack_enum(value)

        return value, size

    def encode(self, value=None):
        value = self.value if value is None else value
        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            raise EncodeError(f'{value!r} cannot be encoded with format \'{self.get_format()}\': {e}', chain=[])

    def to_human(self):
        if self.enum and isinstance(self.value, self.enum):
            return self.value.name

        width = self.size * 2  # we want to be as large as possible
        formatter = '0x%%0%dx' % width
        return formatter % self.value


class Int8(StructField):
    def __init__(self, default=0, **kw):
        super().__init__('B', default=default, **kw)


class Int16(StructField):
    def __init__(self, default=0, **kw):
        super().__init__('H', default=default, **kw)


class Int32(StructField):
    def __init__(self, default=0, **kw):
        super().__init__('I', default=default, **kw)


class Int64(StructField):
    def __init__(self, default=0, **kw):
        super().__init__('Q', default=default, **kw)


class Int16le(Int16):
    def __init__(self, default=0, **kw):
        super().__init__(default=default, endianess=Endianess.LITTLE_ENDIAN, **kw)


class Int32le(Int32):
    def __init__(self, default=0, **kw):
        super().__init__(default=default, endianess=Endianess.LITTLE_ENDIAN, **kw)


class Int64le(Int64):
    def __init__(self, default=0, **kw):
        super().__init__(default=default, endianess=Endianess.LITTLE_ENDIAN, **kw)


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The number of bytes is indicated with "n": an integer for a fixed size,
    a Dependency when another field of the header contains it, or None
    if the field takes all the data remaining."""

    length = PropertyDescriptor('length', (int, type(None)))

    def __init__(self, n=None, default=b'', **kw):
        self.length = n

        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.size

    @property
    def declared_length(self):
        return self.__dict__['length']

    def value_from_default(self):
        n = self.declared_length
        if isinstance(n, int) and not self.default:
            return b'\x00' * n

        return self.default

    def _set_value(self, value) -> None:
        """The fixed size StringField has the size as a parameter and we must follow that indication,
        with a Dependency we are going to write back the length when packing."""
        if isinstance(value, str):
            value = value.encode()
        elif isinstance(value, int):
            raise EncodeError(f'a string takes bytes, not the integer {value}', chain=[])
        value = bytes(value)

        n = self.declared_length
        if isinstance(n, int) and len(value) != n:
            raise EncodeError(f'you are trying to set a value with the wrong size (that is {n} bytes)', chain=[])

        self._value = value

    def _get_size(self):
        return len(self.value)

    @property
    def fixed_size(self):
        n = self.declared_length
        return n if isinstance(n, int) else None

    def update_dependencies(self):
        if 'length' in self.get_dependencies():
            self.length = self.size

    def decode(self, data, offset=0):
        n = self.declared_length
        if n is None:
            n = len(data) - offset
        elif isinstance(n, Dependency):
            n = self.length

        self._check_available(data, offset, n)

        return bytes(data[offset:offset + n]), n

    def encode(self, value=None):
        value = self.value if value is None else value
        n = self.declared_length
        if isinstance(n, int) and len(value) != n:
            raise EncodeError(f'{value!r} has not the expected size of {n} bytes', chain=[])

        return bytes(value)

    def to_human(self):
        return repr(self.value)


class BodyField(StringField):
    '''Takes as much data as possible. After the binding resolution it can
    contain a nested header instead of raw bytes.'''
    is_body = True

    def __init__(self, **kw):
        super().__init__(n=None, **kw)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    @property
    def is_nested(self):
        from .core import Header
        return isinstance(self.value, Header)

    def _set_value(self, value) -> None:
        from .core import Header
        if isinstance(value, Header):
            self._value = value
            return

        super()._set_value(value)

    def _get_size(self):
        if self.is_nested:
            return self.value.size

        return super()._get_size()

    def encode(self, value=None):
        value = self.value if value is None else value
        if hasattr(value, 'pack'):
            return value.pack()

        return super().encode(value)

    def to_human(self):
        if self.is_nested:
            return f'<{self.value.__class__.__name__}>'

        return super().to_human()


class AddressField(Field):
    '''Fixed size address with a separator-delimited human representation.

    The value is kept as bytes; assigning a string parses it.'''
    width = None
    separator = None
    base = 10
    digits = string.digits
    segment_format = '%d'

    def __init__(self, default=None, **kw):
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.to_human())

    def value_from_default(self):
        return self.default if self.default is not None else b'\x00' * self.width

    def _get_size(self):
        return self.width

    @property
    def fixed_size(self):
        return self.width

    def _set_value(self, value) -> None:
        if isinstance(value, str):
            value = self.parse(value)
        elif isinstance(value, int):
            value = self.from_int(value)

        value = bytes(value)
        if len(value) != self.width:
            raise EncodeError(f'{self.__class__.__name__} needs exactly {self.width} bytes, not {len(value)}', chain=[])

        self._value = value

    def from_int(self, value: int) -> bytes:
        '''The address as a big endian integer (like 0xc0a80101 for 192.168.1.1).'''
        try:
            return value.to_bytes(self.width, 'big')
        except OverflowError:
            raise EncodeError(f'{value} does not fit into {self.width} bytes', chain=[])

    def parse(self, text: str) -> bytes:
        segments = text.split(self.separator)
        if len(segments) != self.width:
            raise FormatError(
                f"'{text}' must have {self.width} segments separated by '{self.separator}'", chain=[])

        result = []
        for segment in segments:
            if not segment or any(_ not in self.digits for _ in segment):
                raise FormatError(f"'{segment}' is not a valid segment in '{text}'", chain=[])

            number = int(segment, self.base)
            if number > 0xff:
                raise FormatError(f"'{segment}' is out of range in '{text}'", chain=[])

            result.append(number)

        return bytes(result)

    def decode(self, data, offset=0):
        self._check_available(data, offset, self.width)

        return bytes(data[offset:offset + self.width]), self.width

    def encode(self, value=None):
        value = self.value if value is None else value
        if isinstance(value, str):
            value = self.parse(value)

        if len(value) != self.width:
            raise EncodeError(f'{value!r} has not the expected size of {self.width} bytes', chain=[])

        return bytes(value)

    def to_human(self):
        return self.separator.join(self.segment_format % _ for _ in self.value)


class MacAddrField(AddressField):
    '''Hardware address, 'aa:bb:cc:dd:ee:ff' is its human form.'''
    width = 6
    separator = ':'
    base = 16
    digits = string.hexdigits
    segment_format = '%02x'


class IPAddrField(AddressField):
    '''IPv4 address, in human form it's dotted decimal.'''
    width = 4
    separator = '.'


class BitField(Field):
    '''Sub-byte values packed (most significant bit first) in a fixed number of bytes.

        tci = fields.BitField(2, [('pcp', 3), ('dei', 1), ('vid', 12)])

    The value is a dictionary with the names of the layout as keys.
    '''

    def __init__(self, width, layout, default=None, **kw):
        self.width = width
        self.layout = tuple(layout)

        bits = sum(_[1] for _ in self.layout)
        if bits != width * 8:
            raise SchemaError(f'the layout takes {bits} bits instead of {width * 8}')

        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.to_human())

    def __getitem__(self, item):
        return self.value[item]

    def __setitem__(self, item, value):
        self.value = {item: value}

    def get_format(self):
        return ', '.join(f'uint:{bits}' for _, bits in self.layout)

    def value_from_default(self):
        value = {name: 0 for name, _ in self.layout}
        value.update(self.default or {})

        return value

    def _set_value(self, value) -> None:
        if isinstance(value, int):
            try:
                value = Bits(uint=value, length=self.width * 8).bytes
            except ValueError as e:
                raise EncodeError(f'{value} does not fit in {self.width} bytes: {e}', chain=[])
            value, _ = self.decode(value)

        names = [name for name, _ in self.layout]
        unknown = set(value) - set(names)
        if unknown:
            raise KeyError(f'unknown bit fields: {", ".join(sorted(unknown))}')

        current = dict(getattr(self, '_value', None) or {name: 0 for name in names})
        current.update(value)

        self._value = current

    def _get_size(self):
        return self.width

    @property
    def fixed_size(self):
        return self.width

    def decode(self, data, offset=0):
        self._check_available(data, offset, self.width)

        values = Bits(bytes(data[offset:offset + self.width])).unpack(self.get_format())

        return dict(zip([name for name, _ in self.layout], values)), self.width

    def encode(self, value=None):
        value = self.value if value is None else value
        try:
            return bitstring_pack(self.get_format(), *[value[name] for name, _ in self.layout]).bytes
        except ValueError as e:
            raise EncodeError(f'{value!r} cannot be encoded with layout {self.layout}: {e}', chain=[])

    def to_human(self):
        return ','.join(f'{name}={self.value[name]}' for name, _ in self.layout)
