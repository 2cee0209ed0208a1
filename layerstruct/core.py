"""
Core module for the abstraction of a protocol header

"""
import logging
from collections import OrderedDict
from typing import Dict, List, Tuple

from .fields import Field
from .meta import MetaHeader
from .exceptions import LayerStructException, ParseError


logger = logging.getLogger(__name__)


class Header(metaclass=MetaHeader):
    """
    Main class that defines a protocol header: each class attribute that is a Field
    becomes part of the schema, in the same order it's declared, and that is also the
    order on the wire.

        class Simple(Header):
            kind   = fields.Int8(default=1)
            length = fields.Int16()
            data   = fields.StringField(Dependency('.length'))

            class Meta:
                aliases = {
                    'type': 'kind',
                }

    The instance can be built from the bytes on the wire or from the values of
    the fields, indicated by name or by alias; unknown names are ignored.
    """

    def __init__(self, data=None, /, **options):
        for field_name, prototype in self.get_prototypes():
            self.__dict__[field_name] = prototype.create(father=self)

        for key, value in options.items():
            canonical = self.canonical_name(key)
            if canonical is None:
                logger.debug('ignoring unknown option \'%s\' for %s' % (key, self.__class__.__name__))
                continue

            # the canonical name wins over its aliases
            if canonical != key and canonical in options:
                logger.debug('ignoring \'%s\' since \'%s\' is also given' % (key, canonical))
                continue

            setattr(self, canonical, value)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if data is not None:
            logger.debug('unpacking \'%s\' from %d bytes' % (self.__class__.__name__, len(data)))
            self.unpack(data)

    @classmethod
    def from_bytes(cls, data):
        return cls(data)

    @classmethod
    def get_ordered_fields_name(cls) -> Tuple[str, ...]:
        return cls._meta.fields

    @classmethod
    def get_prototypes(cls) -> List[Tuple[str, Field]]:
        return [(_, cls._meta.prototypes[_]) for _ in cls.get_ordered_fields_name()]

    @classmethod
    def canonical_name(cls, name):
        '''Resolve a name (canonical or alias) to the canonical one, None if unknown.'''
        if name in cls._meta.prototypes:
            return name

        return cls._meta.aliases.get(name)

    @classmethod
    def min_size(cls) -> int:
        '''The sum of the fixed sizes of the fields preceding the body.'''
        size = 0
        for field_name, prototype in cls.get_prototypes():
            if field_name == cls._meta.body:
                break
            size += prototype.fixed_size or 0

        return size

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, self.__dict__[_]) for _ in self.get_ordered_fields_name()]

    def get_body(self):
        if self._meta.body is None:
            return None

        return getattr(self, self._meta.body)

    def fields_values(self) -> Dict[str, object]:
        return OrderedDict((name, field.value) for name, field in self.get_fields())

    def __getitem__(self, name):
        canonical = self.canonical_name(name)
        if canonical is None:
            raise KeyError(name)

        return getattr(self, canonical)

    def __setitem__(self, name, value):
        canonical = self.canonical_name(name)
        if canonical is None:
            raise KeyError(name)

        setattr(self, canonical, value)

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        return self.to_human()

    def __eq__(self, other):
        if not isinstance(other, Header):
            return NotImplemented

        return self.__class__ is other.__class__ and self.pack() == other.pack()

    __hash__ = None

    def __len__(self):
        return self.size

    def __bytes__(self):
        return self.pack()

    def summary(self) -> Dict[str, str]:
        '''Ordered mapping between the names of the fields and their human representation.'''
        return OrderedDict((name, field.to_human()) for name, field in self.get_fields())

    def to_human(self) -> str:
        msg = ''
        for field_name, human in self.summary().items():
            msg += '%s: %s\n' % (field_name, human)
        return msg

    def _get_size(self):
        size = 0
        for field_name, field in self.get_fields():
            size += field.size

        return size

    size = property(fget=lambda self: self._get_size())

    @property
    def raw(self):
        return self.pack()

    def update_dependencies(self):
        for field_name, field in self.get_fields():
            field.update_dependencies()

    def pack(self) -> bytes:
        '''Encode the instance: the fields other fields depend on (like lengths)
        are rewritten with the actual sizes before anything else.'''
        self.update_dependencies()

        value = b''
        for field_name, field in self.get_fields():
            logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))
            try:
                value += field.pack()
            except LayerStructException as e:
                e.chain.append(field_name)
                raise

        return value

    def unpack(self, data, offset=0) -> int:
        '''This is one of the main APIs: it takes binary data and fills
        the fields in the order they are declared. It returns the number
        of bytes consumed.

        Data shorter than the fixed part of the header is rejected before
        touching any field.'''
        data = bytes(data)
        min_size = self.min_size()
        if len(data) - offset < min_size:
            raise ParseError(
                f'{self.__class__.__name__} needs at least {min_size} bytes, got {len(data) - offset}',
                chain=[])

        start = offset
        for field_name, field in self.get_fields():
            logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, offset))
            try:
                offset += field.unpack(data, offset)
            except LayerStructException as e:
                e.chain.append(field_name)
                raise

        return offset - start


def make_header(name: str, fields, aliases=None, base=Header):
    '''Build a Header subclass from a list of (name, field): it's the
    same thing as declaring the class.'''
    attrs = OrderedDict(fields)
    attrs['__module__'] = __name__
    if aliases:
        attrs['Meta'] = type('Meta', (), {'aliases': dict(aliases)})

    return type(base)(name, (base,), attrs)
